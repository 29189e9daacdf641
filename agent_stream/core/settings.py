from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from env vars and local env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    default_agent_id: str = Field(default="memory-agent", alias="DEFAULT_AGENT_ID")
    default_model: str = Field(default="anthropic/claude-3-7-sonnet-latest", alias="DEFAULT_MODEL")
    model_temperature: float = Field(default=0.0, alias="MODEL_TEMPERATURE")
    model_provider_base_url: str = Field(default="http://localhost:8010/v1", alias="MODEL_PROVIDER_BASE_URL")
    model_provider_api_key: str = Field(default="model-provider", alias="MODEL_PROVIDER_API_KEY")

    agents_use_mock: bool = Field(default=False, alias="AGENTS_USE_MOCK")
    agents_mock_messages_file: str = Field(
        default="mock-data/agent-messages.md",
        alias="AGENTS_MOCK_MESSAGES_FILE",
    )

    thread_id_header: str = Field(default="x-thread-id", alias="THREAD_ID_HEADER")
    stream_api_base_url: str = Field(default="http://localhost:8000", alias="STREAM_API_BASE_URL")
    stream_connect_timeout_seconds: float = Field(default=10.0, alias="STREAM_CONNECT_TIMEOUT_SECONDS")
    stream_read_timeout_seconds: float = Field(default=120.0, alias="STREAM_READ_TIMEOUT_SECONDS")

    @property
    def enable_swagger(self) -> bool:
        return self.app_env.lower() == "local"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.app_env.lower() == "local" else "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
