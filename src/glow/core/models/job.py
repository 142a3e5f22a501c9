from enum import StrEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator

from glow.core.models.backend import ModelBackend


class StatusCode(StrEnum):
    pending = "pending"
    running = "running"
    succeeded = "succeeded"
    failed = "failed"
    canceled = "canceled"


# Replicate reports queued/booting predictions as "starting" and
# in-flight ones as "processing"
REMOTE_STATUS_ALIASES = {
    "starting": StatusCode.pending,
    "processing": StatusCode.running,
}

TERMINAL_STATUSES = {StatusCode.succeeded, StatusCode.failed, StatusCode.canceled}


class JobRequest(BaseModel):
    """Normalized prediction payload; one instance per inbound call."""

    version: str
    input: Dict[str, Any]

    model_config = {"frozen": True}

    @classmethod
    def for_backend(cls, backend: ModelBackend, image_ref: str) -> "JobRequest":
        return cls(version=backend.version, input=backend.build_input(image_ref))

    @property
    def image(self) -> str:
        return self.input["image"]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class JobStatus(BaseModel):
    """Snapshot of a remote prediction, produced fresh on every poll."""

    id: Optional[str] = None
    status: StatusCode = StatusCode.pending
    output: Any = None
    error: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> StatusCode:
        # Anything we don't recognise is treated as still in progress
        if value is None:
            return StatusCode.pending
        key = str(value).lower().strip()
        if key in REMOTE_STATUS_ALIASES:
            return REMOTE_STATUS_ALIASES[key]
        try:
            return StatusCode(key)
        except ValueError:
            return StatusCode.pending

    @field_validator("error", mode="before")
    @classmethod
    def stringify_error(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return value if isinstance(value, str) else str(value)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_succeeded(self) -> bool:
        return self.status == StatusCode.succeeded

    @property
    def is_failed(self) -> bool:
        return self.status in (StatusCode.failed, StatusCode.canceled)
