from cloudctx.datasource.source import DataSource


class DataSourceContext:
    """
    Handle on a configured data source. Closing the context closes its pool.

    Usage:
        with builder.build_datasource_context() as context:
            with context.get_datasource().connection() as conn:
                conn.execute("SELECT 1")
    """

    def __init__(self, datasource: DataSource, provider: str = ""):
        if datasource is None:
            raise ValueError("datasource is required")
        self._datasource = datasource
        self.provider = provider

    def get_datasource(self) -> DataSource:
        return self._datasource

    def close(self) -> None:
        self._datasource.close()

    def __enter__(self) -> "DataSourceContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DataSourceContext(provider={self.provider!r}, datasource={self._datasource!r})"
