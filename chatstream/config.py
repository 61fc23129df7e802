"""Client configuration with environment variable loading.

Pydantic-based configuration for the streaming chat client.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_PROCESS_STEPS = ["リクエスト受信", "クエリ生成", "データベース検索", "レスポンス生成"]
INTERRUPTED_NOTICE = "プロセスが中断されました。"
ERROR_NOTICE = "エラーが発生しました。もう一度お試しください。"


def _steps_from_env() -> list[str]:
    raw = os.getenv("CHAT_PROCESS_STEPS")
    if not raw:
        return list(DEFAULT_PROCESS_STEPS)
    return [name.strip() for name in raw.split(",")]


class ClientConfig(BaseModel):
    """Configuration for the streaming chat client.

    Attributes:
        api_base_url: Base URL of the question-answering backend.
        chat_path: Path of the streaming chat endpoint.
        connect_timeout: Seconds allowed to establish the connection.
        process_steps: Ordered names of the backend processing steps.
        interrupted_notice: Message appended when a request is aborted.
        error_notice: Message appended when a request fails.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
        description="Base URL of the question-answering backend",
    )
    chat_path: str = Field(
        default_factory=lambda: os.getenv("CHAT_PATH", "/chat"),
        description="Path of the streaming chat endpoint",
    )
    connect_timeout: float = Field(
        default_factory=lambda: float(os.getenv("CONNECT_TIMEOUT", "10.0")),
        gt=0.0,
        description="Connect timeout in seconds (reads never time out)",
    )
    process_steps: list[str] = Field(
        default_factory=_steps_from_env,
        min_length=1,
        description="Ordered backend processing step names",
    )
    interrupted_notice: str = INTERRUPTED_NOTICE
    error_notice: str = ERROR_NOTICE

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("chat_path")
    @classmethod
    def validate_chat_path(cls, v: str) -> str:
        """Require an absolute path."""
        v = v.strip()
        if not v.startswith("/"):
            raise ValueError("CHAT_PATH must start with '/'")
        return v

    @field_validator("process_steps")
    @classmethod
    def validate_process_steps(cls, v: list[str]) -> list[str]:
        """Reject blank or duplicate step names."""
        if any(not name.strip() for name in v):
            raise ValueError("Process step names must be non-empty")
        if len(set(v)) != len(v):
            raise ValueError("Process step names must be unique")
        return v

    @property
    def endpoint(self) -> str:
        """Full URL of the streaming chat endpoint."""
        return f"{self.api_base_url}{self.chat_path}"

    @property
    def query_step(self) -> str | None:
        """Step that produces the generated query (the second step)."""
        return self.process_steps[1] if len(self.process_steps) > 1 else None

    @property
    def search_step(self) -> str | None:
        """Step that produces the search results (the third step)."""
        return self.process_steps[2] if len(self.process_steps) > 2 else None


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If an environment value is invalid.
    """
    return ClientConfig()
