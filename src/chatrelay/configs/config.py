"""Configuration management using pydantic-settings.

``get_app_config()`` builds a fresh ``AppConfig`` on every call.  The
application lifespan calls it once and keeps the result on
``app.state.config``; request handlers receive that frozen instance via
``Depends(get_config)`` and never read the environment themselves.

Priority order (highest first):

1. Init kwargs
2. Environment variables (``CHATRELAY_`` prefix, ``__`` nesting)
3. ``.env`` dotenv file
4. Static YAML (``configs/config.yaml``)
5. File secrets, then field defaults
"""

from pathlib import Path

from fastapi import Request
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import (
    APIConfig,
    DashScopeConfig,
    DeepSeekConfig,
    LoggingConfig,
    PromptConfig,
    TracingConfig,
)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"  # Nested environment variable delimiter
ENV_PREFIX = "CHATRELAY_"

DEFAULT_ENCODING = "utf-8"


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    api: APIConfig = Field(
        default_factory=APIConfig,
        description="API configuration settings",
    )

    deepseek: DeepSeekConfig = Field(
        default_factory=DeepSeekConfig,
        description="Streaming provider (DeepSeek) settings",
    )

    dashscope: DashScopeConfig = Field(
        default_factory=DashScopeConfig,
        description="Single-shot provider (DashScope) settings",
    )

    prompt: PromptConfig = Field(
        default_factory=PromptConfig,
        description="Prompt file locations",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )

    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="OpenTelemetry tracing settings",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def resolve_path(path: Path) -> Path:
    """Resolve a configured path against the project root."""
    return path if path.is_absolute() else PROJECT_ROOT / path


def get_app_config() -> AppConfig:
    """Build the application configuration from all sources."""
    return AppConfig()


def get_config(request: Request) -> AppConfig:
    """FastAPI dependency: the config captured by the lifespan."""
    return request.app.state.config
