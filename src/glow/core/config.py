"""Configuration models for core domain components.

Pydantic models that gather the settings each core component needs, so the
composition root can inject them and tests can build their own.
"""

from pydantic import BaseModel, Field


class PollerConfig(BaseModel):
    """Configuration for JobPoller behavior.

    The maximum wait is roughly `max_attempts * interval` plus the time the
    status queries themselves take.

    Attributes:
        max_attempts: Status queries issued before giving up with a timeout
        interval: Seconds slept between two non-terminal status queries
        status_retry_attempts: Tries per status query on transient transport errors
        status_retry_base_wait: Base wait in seconds for exponential backoff
        status_retry_max_wait: Upper bound in seconds for a single backoff wait
    """

    max_attempts: int = Field(
        default=120,
        ge=1,
        description="Attempt ceiling for status queries",
    )

    interval: float = Field(
        default=1.0,
        ge=0,
        description="Delay in seconds between status queries (float for test flexibility)",
    )

    status_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Tries per status query when the transport fails transiently",
    )

    status_retry_base_wait: float = Field(default=0.2, gt=0)

    status_retry_max_wait: float = Field(default=1.0, gt=0)

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @classmethod
    def from_app_settings(cls, settings) -> "PollerConfig":
        """Build from a GlowSettings instance."""
        return cls(
            max_attempts=settings.GLOW_POLL_MAX_ATTEMPTS,
            interval=settings.GLOW_POLL_INTERVAL,
            status_retry_attempts=settings.GLOW_STATUS_RETRY_ATTEMPTS,
        )
