from abc import ABC, abstractmethod


class DbAuthTokenGenerator(ABC):
    """
    Produces a short-lived database authentication token.

    generate_token() is called once per physical connection attempt and its
    result is used exactly once. Implementations must not cache tokens and must
    be safe to call from several pool threads at the same time.
    """

    @abstractmethod
    def generate_token(self) -> str:
        """
        Returns:
            A fresh token to send as the connection password

        Raises:
            TokenGenerationFailure: If the vendor token request or signing fails
        """
        pass
