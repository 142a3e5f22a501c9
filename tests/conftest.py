from typing import Any, Dict, List

import pytest

from glow.core.config import PollerConfig
from glow.core.exceptions import UpstreamException
from glow.core.interfaces.predictions import PredictionsPort
from glow.core.managers.enhancement_manager import EnhancementManager
from glow.core.models.backend import FLUX_QFACES
from glow.core.models.job import JobRequest
from glow.core.models.upstream_problem import UpstreamProblem
from glow.core.services.job_poller import JobPoller


class FakePredictions(PredictionsPort):
    """Scripted prediction API.

    `statuses` is consumed one entry per status query; the last entry repeats
    once the script runs out. Entries may be dicts or exceptions to raise.
    """

    def __init__(
        self,
        submit_response: Dict[str, Any] | Exception | None = None,
        statuses: List[Dict[str, Any] | Exception] | None = None,
    ):
        self.submit_response = (
            submit_response if submit_response is not None else {"id": "pred-1", "status": "starting"}
        )
        self.statuses = list(statuses or [])
        self.submitted: List[JobRequest] = []
        self.queried: List[str] = []
        self.cancelled: List[str] = []

    async def submit(self, job_request: JobRequest) -> Dict[str, Any]:
        self.submitted.append(job_request)
        if isinstance(self.submit_response, Exception):
            raise self.submit_response
        return self.submit_response

    async def get(self, job_id: str) -> Dict[str, Any]:
        self.queried.append(job_id)
        index = min(len(self.queried), len(self.statuses)) - 1
        entry = self.statuses[index]
        if isinstance(entry, Exception):
            raise entry
        return entry

    async def cancel(self, job_id: str) -> Dict[str, Any]:
        self.cancelled.append(job_id)
        return {"id": job_id, "status": "canceled"}


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def upstream_error(status: int, detail: str = "boom") -> UpstreamException:
    return UpstreamException(
        UpstreamProblem(title="Upstream HTTP Error", status=status, detail=detail)
    )


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def poller_config():
    return PollerConfig(
        max_attempts=5,
        interval=1.0,
        status_retry_attempts=3,
        status_retry_base_wait=0.001,
        status_retry_max_wait=0.005,
    )


@pytest.fixture
def make_manager(poller_config, sleep_recorder):
    """Build an EnhancementManager around a FakePredictions instance."""

    def _make(predictions: FakePredictions, cancel_on_disconnect: bool = True, **config):
        cfg = poller_config.model_copy(update=config) if config else poller_config
        poller = JobPoller(predictions, cfg, sleep=sleep_recorder)
        return EnhancementManager(
            predictions, poller, FLUX_QFACES, cancel_on_disconnect=cancel_on_disconnect
        )

    return _make
