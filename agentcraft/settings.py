"""Environment-driven configuration for the API, the CLI and the tests."""

from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Every knob is an environment variable of the same name, upper-cased.

    Only ``LLM_API_KEY`` is mandatory to construct settings. The HTTP
    service also refuses to start without ``JWT_SECRET_KEY``. Without
    ``DATABASE_URL`` it starts but reports itself not ready; Redis only
    enables rate limiting.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Completions
    llm_provider: Literal["openrouter", "openai", "ollama"] = "openai"
    llm_api_key: str = Field(..., description="API key for the completion provider")
    llm_model: str = Field(default="gpt-4o-mini", description="Model shared by every agent")
    llm_base_url: Optional[str] = Field(
        default=None, description="Endpoint override for OpenAI-compatible gateways"
    )
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=500, ge=1)
    llm_timeout_seconds: float = Field(default=30.0, gt=0)

    app_env: str = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Conversation store
    database_url: Optional[str] = Field(
        default=None, description="postgresql+asyncpg://... or sqlite+aiosqlite:///..."
    )
    database_pool_size: int = Field(default=5, ge=1, le=50)
    database_pool_overflow: int = Field(default=10, ge=0, le=100)

    # Rate limiting
    redis_url: Optional[str] = None
    redis_key_prefix: str = "agentcraft:"

    # Tokens
    jwt_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = Field(default=30, ge=1)
    jwt_refresh_token_expire_days: int = Field(default=7, ge=1)
    password_reset_token_expire_minutes: int = Field(default=60, ge=1)
    password_reset_url: str = Field(
        default="http://localhost:5000/reset-password",
        description="Page the emailed reset link points at",
    )

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5000"])

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_settings() -> Settings:
    """
    Read settings from the environment and ``.env``.

    Raises:
        ValueError: With a hint when the provider key is missing.
    """
    try:
        return Settings()
    except ValidationError as e:
        message = f"Failed to load settings: {e}"
        if any("llm_api_key" in err["loc"] for err in e.errors()):
            message += "\nSet LLM_API_KEY in the environment or in .env"
        raise ValueError(message) from e
