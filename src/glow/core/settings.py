from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings
from rich import print

from glow.adapters.logging_adapter import LoggingAdapter
from glow.core.exceptions import ConfigurationError
from glow.core.interfaces.logging import LoggingPort
from glow.core.models.backend import BACKENDS


# using pydantic_settings to manage environment variables
# and do automatic type casting in a central place
class GlowSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
        "populate_by_name": True,
    }
    GLOW_LOG_LEVEL: str = "INFO"
    GLOW_HOST: str = "0.0.0.0"
    GLOW_PORT: int = Field(
        default=3000, validation_alias=AliasChoices("GLOW_PORT", "PORT")
    )
    GLOW_SERVICE_NAME: str = "NaturalGlow API"
    GLOW_REPLICATE_API_TOKEN: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("GLOW_REPLICATE_API_TOKEN", "REPLICATE_API_TOKEN"),
    )
    GLOW_REPLICATE_API_URL: str = "https://api.replicate.com/v1"
    GLOW_MODEL_BACKEND: str = "flux-qfaces"
    # 120 attempts at 1s is roughly a two minute ceiling
    GLOW_POLL_MAX_ATTEMPTS: int = 120
    GLOW_POLL_INTERVAL: float = 1.0
    GLOW_HTTP_TIMEOUT: float = 30.0
    GLOW_STATUS_RETRY_ATTEMPTS: int = 3
    GLOW_CANCEL_ON_DISCONNECT: bool = True
    GLOW_CORS_ORIGINS: list[str] = ["*"]

    @field_validator("GLOW_REPLICATE_API_URL", mode="before")
    def strip_trailing_slash(cls, value: str) -> str:
        """Routes are joined as f"{base}/predictions", so drop a trailing slash."""
        return value.rstrip("/")

    def validate_startup(self) -> None:
        """Fail fast instead of surfacing a missing token as per-request 500s."""
        token = self.GLOW_REPLICATE_API_TOKEN
        if token is None or not token.get_secret_value().strip():
            raise ConfigurationError(
                "GLOW_REPLICATE_API_TOKEN (or REPLICATE_API_TOKEN) is not set"
            )
        if self.GLOW_MODEL_BACKEND not in BACKENDS:
            raise ConfigurationError(
                f"GLOW_MODEL_BACKEND '{self.GLOW_MODEL_BACKEND}' is unknown, "
                f"available: {', '.join(sorted(BACKENDS))}"
            )
        if self.GLOW_POLL_MAX_ATTEMPTS < 1:
            raise ConfigurationError("GLOW_POLL_MAX_ATTEMPTS must be at least 1")

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("Glow Settings:")
        print(self)


app_settings = GlowSettings()

logger = LoggingAdapter("glow", app_settings.GLOW_LOG_LEVEL)
