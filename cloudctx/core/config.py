import os
import sys
import importlib.util
from typing import Callable, Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


_ENV_LOADED = False

TRUE_VALUES = ("true", "1", "yes", "y", "on")
FALSE_VALUES = ("false", "0", "no", "n", "off")


def _load_env_file(path: str, allow_override: bool = False) -> None:
    """
    Minimal .env loader: loads KEY=VALUE pairs into os.environ.
    - Ignores empty lines and lines starting with '#'
    - Supports values wrapped in single or double quotes
    - By default, does not override existing environment variables
    """
    try:
        if not path or not os.path.exists(path):
            return
        with open(path, "r", encoding="utf-8") as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("export "):
                    line = line[len("export "):].strip()
                if "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()
                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]
                if allow_override or key not in os.environ:
                    os.environ[key] = value
    except FileNotFoundError:
        pass
    except PermissionError as e:
        print(f"FATAL: Permission denied reading environment file {path}: {e}", file=sys.stderr)
        raise


def load_env_if_present(force_reload: bool = False) -> None:
    """
    Load environment variables from CLOUDCTX_ENV_FILE when set, otherwise from
    .env.local and .env in the working directory. Existing variables win.
    """
    global _ENV_LOADED
    if _ENV_LOADED and not force_reload:
        return

    custom = os.environ.get("CLOUDCTX_ENV_FILE")
    if custom:
        _load_env_file(custom, allow_override=False)
    else:
        for env_file in ('.env.local', '.env'):
            _load_env_file(env_file, allow_override=False)

    _ENV_LOADED = True


def is_on(value, default: bool = False) -> bool:
    """Interpret a flag value the way environment toggles are written."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    val = str(value).strip().lower()
    if val in TRUE_VALUES:
        return True
    if val in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value}")


class Settings(BaseModel):
    """
    cloudctx settings from environment variables.

    CLOUDCTX_IDENTITY / CLOUDCTX_CREDENTIAL are explicit static credentials and
    rank with builder calls and override properties. The two debug toggles switch
    the credential providers between the null and the console logger.
    """
    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    identity: Optional[str] = Field(None, alias="CLOUDCTX_IDENTITY")
    credential: Optional[str] = Field(None, alias="CLOUDCTX_CREDENTIAL")
    aws_credentials_debug: bool = Field(False, alias="CLOUDCTX_AWS_CREDENTIALS_DEBUG")
    azure_credentials_debug: bool = Field(False, alias="CLOUDCTX_AZURE_CREDENTIALS_DEBUG")
    log_level: str = Field("INFO", alias="CLOUDCTX_LOG_LEVEL")
    default_aws_region: str = Field("us-east-1", alias="CLOUDCTX_DEFAULT_AWS_REGION")

    @field_validator('identity', 'credential', mode='before')
    def blank_to_none(cls, v):
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("Expected string value")
        return v if v.strip() else None

    @field_validator('aws_credentials_debug', 'azure_credentials_debug', mode='before')
    def coerce_bool(cls, v):
        return is_on(v)

    @field_validator('log_level', mode='before')
    def normalize_level(cls, v):
        return str(v or "INFO").strip().upper()

    @property
    def has_explicit_credentials(self) -> bool:
        return self.identity is not None

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        values = {
            alias: env.get(alias)
            for alias in (
                "CLOUDCTX_IDENTITY",
                "CLOUDCTX_CREDENTIAL",
                "CLOUDCTX_AWS_CREDENTIALS_DEBUG",
                "CLOUDCTX_AZURE_CREDENTIALS_DEBUG",
                "CLOUDCTX_LOG_LEVEL",
                "CLOUDCTX_DEFAULT_AWS_REGION",
            )
            if env.get(alias) is not None
        }
        return cls(**values)


_settings: Optional[Settings] = None


def get_settings(reload: bool = False) -> Settings:
    """Load settings once; pass reload=True after changing the environment."""
    global _settings
    if _settings is None or reload:
        load_env_if_present(force_reload=reload)
        _settings = Settings.from_env()
    return _settings


# Vendor SDK capabilities
#
# Whether boto3 or azure-identity is installed is decided once at startup and
# handed to providers and builders as a plain value.

AWS_SDK_MODULES: Tuple[str, ...] = ("boto3", "botocore")
AZURE_SDK_MODULES: Tuple[str, ...] = ("azure.identity", "azure.core")

ModuleProbe = Callable[[str], object]


class SdkCapabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws: bool = False
    azure: bool = False


def _module_present(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        # find_spec imports parent packages; a missing "azure" namespace raises
        return False


def detect_sdk_capabilities(probe: Optional[ModuleProbe] = None) -> SdkCapabilities:
    """
    Probe for the optional vendor SDKs.

    Args:
        probe: Callable returning a truthy value when a module is importable.
               Defaults to an importlib.util.find_spec based check.

    Returns:
        SdkCapabilities with one flag per vendor
    """
    probe = probe or _module_present
    return SdkCapabilities(
        aws=all(probe(name) for name in AWS_SDK_MODULES),
        azure=all(probe(name) for name in AZURE_SDK_MODULES),
    )
