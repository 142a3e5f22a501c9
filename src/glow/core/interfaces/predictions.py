from abc import ABC, abstractmethod
from typing import Any, Dict

from glow.core.models.job import JobRequest


class PredictionsPort(ABC):
    """Outbound port to the asynchronous image-generation job API."""

    @abstractmethod
    async def submit(self, job_request: JobRequest) -> Dict[str, Any]:
        """Create a prediction. Returns the raw response body, which carries
        `id` on success and may carry `error` on rejection."""
        pass

    @abstractmethod
    async def get(self, job_id: str) -> Dict[str, Any]:
        """Return the raw status body `{status, output?, error?}` for a prediction."""
        pass

    @abstractmethod
    async def cancel(self, job_id: str) -> Dict[str, Any]:
        """Ask the API to stop a running prediction."""
        pass
