from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class DeepSeekConfig(BaseModel):
    """Streaming chat-completions provider settings."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr | None = Field(
        default=None,
        description="DeepSeek API key; the streaming endpoint fails closed without it",
    )
    base_url: str = Field(
        default="https://api.deepseek.com/v1",
        description="OpenAI-compatible API base URL",
    )
    model: str = Field(default="deepseek-chat", description="Chat model identifier")
    temperature: float = Field(
        default=0.7, description="Sampling temperature for model responses"
    )
    connect_timeout: timedelta = Field(
        default=timedelta(seconds=10),
        description="Bound on establishing the upstream connection",
    )


class DashScopeConfig(BaseModel):
    """Single-shot application-completion provider settings."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr | None = Field(
        default=None,
        description="DashScope API key; the single-shot endpoint fails closed without it",
    )
    app_id: str | None = Field(
        default=None, description="DashScope application (route) identifier"
    )
    base_url: str = Field(
        default="https://dashscope.aliyuncs.com/api/v1",
        description="DashScope API base URL",
    )
    timeout: timedelta = Field(
        default=timedelta(seconds=10),
        description="Wall-clock bound on one completion call",
    )
    default_prompt: str = Field(
        default="你好",
        description="Prompt used when the conversation has no user turn",
    )
    request_id_header: str = Field(
        default="x-request-id",
        description="Response header carrying the provider's request id",
    )


class PromptConfig(BaseModel):
    """Locations of the optional prompt files for the streaming endpoint."""

    model_config = ConfigDict(frozen=True)

    system_prompt_file: Path = Field(
        default=Path("configs/system_prompt.txt"),
        description="System prompt file, relative paths resolve against the project root",
    )
    user_prompt_file: Path = Field(
        default=Path("configs/user_prompt.txt"),
        description="User prompt file appended to the latest user turn",
    )
    user_prompt_separator: str = Field(
        default="\n\n",
        description="Text inserted between the user turn and the user prompt",
    )


class APIConfig(BaseModel):
    """API configuration settings."""

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(default="/api", description="Route prefix for chat endpoints")


class LoggingConfig(BaseModel):
    """Root logger settings."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of coloured text"
    )
    quiet_loggers: list[str] = Field(
        default_factory=lambda: ["httpx", "httpcore", "opentelemetry"],
        description="Third-party loggers capped at WARNING",
    )


class TracingConfig(BaseModel):
    """OpenTelemetry exporter settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Enable OTLP tracing")
    endpoint: str = Field(default="", description="OTLP/HTTP traces endpoint")
    username: str = Field(default="", description="Basic auth user for the collector")
    password: SecretStr = Field(
        default=SecretStr(""), description="Basic auth password for the collector"
    )
    service_name: str = Field(default="chatrelay", description="OTEL service.name")
    sample_rate: float = Field(default=1.0, description="Root trace sampling ratio")
    excluded_urls: list[str] = Field(
        default_factory=lambda: ["/health", "/metrics"],
        description="Paths skipped by the FastAPI instrumentor",
    )
