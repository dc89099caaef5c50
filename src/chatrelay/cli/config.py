"""Configuration management for the CLI tool."""

from typing import Literal

from pydantic import BaseModel, Field

Mode = Literal["stream", "single"]


class CLIConfig(BaseModel):
    """CLI configuration settings."""

    host: str = Field(
        default="localhost",
        description="Server host",
    )
    port: int = Field(
        default=8080,
        description="Server port",
    )
    mode: Mode = Field(
        default="stream",
        description="'stream' for the SSE endpoint, 'single' for the JSON endpoint",
    )
    stream_path: str = Field(
        default="/api/chat",
        description="API path for the streaming endpoint",
    )
    single_path: str = Field(
        default="/api/dashscope",
        description="API path for the single-shot endpoint",
    )
    timeout: float = Field(
        default=300.0,
        description="HTTP timeout in seconds",
    )

    @property
    def base_url(self) -> str:
        """Get the base URL for the API."""
        return f"http://{self.host}:{self.port}"

    @property
    def chat_url(self) -> str:
        """Get the full URL for the selected endpoint."""
        path = self.stream_path if self.mode == "stream" else self.single_path
        return f"{self.base_url}{path}"
