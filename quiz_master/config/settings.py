"""Application settings and configuration."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings

# Load .env file if present
load_dotenv()

# Model priority list: first entry is the primary, the rest are tried in order
PRIMARY_MODEL = "gemini-3-flash-preview"
FALLBACK_MODELS = (
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GEMINI CONFIG
    gemini_api_key: str | None = Field(
        default=None,
        description="Gemini API key (checked on first use, not at startup)",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )

    # Generation Settings
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for all completions",
        validation_alias="TEMPERATURE",
    )

    # Retry Settings
    max_attempts_per_model: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per model before falling back to the next one",
        validation_alias="MAX_ATTEMPTS_PER_MODEL",
    )

    backoff_base_ms: int = Field(
        default=600,
        ge=0,
        description="Base delay for exponential backoff, in milliseconds",
        validation_alias="BACKOFF_BASE_MS",
    )

    jitter_cap_ms: int = Field(
        default=200,
        ge=0,
        description="Upper bound (exclusive) of the random jitter, in milliseconds",
        validation_alias="JITTER_CAP_MS",
    )

    attempt_timeout_seconds: float | None = Field(
        default=60.0,
        gt=0.0,
        description="Timeout for a single provider call (None disables it)",
        validation_alias="ATTEMPT_TIMEOUT_SECONDS",
    )

    # Output Settings
    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI",
        validation_alias="LOG_LEVEL",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


class ClientConfig(BaseModel):
    """Immutable configuration handed to the completion client."""

    api_key: str | None = Field(None, description="Provider credential")
    primary_model: str = Field(default=PRIMARY_MODEL, min_length=1)
    fallback_models: tuple[str, ...] = Field(default=FALLBACK_MODELS)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_attempts_per_model: int = Field(default=3, ge=1)
    backoff_base_ms: int = Field(default=600, ge=0)
    jitter_cap_ms: int = Field(default=200, ge=0)
    attempt_timeout_seconds: float | None = Field(default=60.0, gt=0.0)

    model_config = {"frozen": True}

    @property
    def models(self) -> tuple[str, ...]:
        """Primary model followed by fallbacks, without duplicates."""
        ordered: list[str] = []
        for name in (self.primary_model, *self.fallback_models):
            if name and name not in ordered:
                ordered.append(name)
        return tuple(ordered)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        """Build a client configuration from loaded settings."""
        return cls(
            api_key=settings.gemini_api_key,
            temperature=settings.temperature,
            max_attempts_per_model=settings.max_attempts_per_model,
            backoff_base_ms=settings.backoff_base_ms,
            jitter_cap_ms=settings.jitter_cap_ms,
            attempt_timeout_seconds=settings.attempt_timeout_seconds,
        )


# This is loaded the first time and then cached for further use by the agents
@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with loaded configuration
    """
    return Settings()
