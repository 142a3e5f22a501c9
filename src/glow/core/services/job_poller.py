"""JobPoller: drives one remote prediction to a terminal state.

State machine per poll loop:
    pending/running      -> sleep `interval`, query again
    succeeded            -> return the status (carries the output)
    failed/canceled      -> raise PollError with the remote error or a fallback
    ceiling reached      -> raise JobTimeoutError
    caller disconnected  -> raise JobCancelledError

Attempts are strictly sequential: one status query in flight per job. The
delay is an `asyncio.sleep`, so only the current request's task is suspended.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from glow.core.config import PollerConfig
from glow.core.exceptions import (
    JobCancelledError,
    JobTimeoutError,
    PollError,
    UpstreamException,
)
from glow.core.interfaces.predictions import PredictionsPort
from glow.core.interfaces.retry import RetryPort
from glow.core.models.job import JobStatus
from glow.core.settings import logger

FAILED_FALLBACK_MESSAGE = "Prediction failed"

AbortCheck = Callable[[], Awaitable[bool]]


class TransientUpstreamError(UpstreamException):
    """Wrapper for transport errors worth retrying (connection, 502/503/504)."""

    pass


class JobPoller:
    def __init__(
        self,
        predictions: PredictionsPort,
        config: PollerConfig,
        retry_port: Optional[RetryPort] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._predictions = predictions
        self.config = config
        self._retry = retry_port
        self._sleep = sleep

    async def poll(
        self, job_id: str, should_abort: Optional[AbortCheck] = None
    ) -> JobStatus:
        """Query `job_id` until it reaches a terminal state.

        Returns the succeeded status. Raises PollError, JobTimeoutError or
        JobCancelledError otherwise.
        """
        max_attempts = self.config.max_attempts
        for attempt in range(1, max_attempts + 1):
            if should_abort is not None and await should_abort():
                logger.info(
                    f"[job:poll] caller disconnected job_id={job_id} attempt={attempt}"
                )
                raise JobCancelledError(job_id, attempts=attempt - 1)

            status = await self._query_status(job_id)
            logger.debug(
                f"[job:poll] job_id={job_id} attempt={attempt}/{max_attempts} status={status.status}"
            )

            if status.is_succeeded:
                logger.info(
                    f"[job:poll] succeeded job_id={job_id} attempts={attempt}"
                )
                return status

            if status.is_failed:
                details = status.error or FAILED_FALLBACK_MESSAGE
                logger.warning(
                    f"[job:poll] terminal {status.status} job_id={job_id} error={details}"
                )
                raise PollError(details, job_id=job_id)

            if attempt < max_attempts:
                await self._sleep(self.config.interval)

        logger.warning(
            f"[job:poll] attempt ceiling reached job_id={job_id} attempts={max_attempts}"
        )
        raise JobTimeoutError(job_id, attempts=max_attempts)

    async def _query_status(self, job_id: str) -> JobStatus:
        """One attempt: a status query, retried only on transient transport errors."""
        try:
            if self._retry:
                body = await self._retry.execute(
                    self._fetch_with_error_classification,
                    job_id,
                    attempts=self.config.status_retry_attempts,
                    wait_initial=self.config.status_retry_base_wait,
                    wait_max=self.config.status_retry_max_wait,
                    exception_types=(TransientUpstreamError,),
                )
            else:
                body = await self._fetch_with_error_classification(job_id)
        except UpstreamException as exc:
            logger.error(
                f"[job:poll] status query failed job_id={job_id} "
                f"status={exc.response.status} title={exc.response.title}"
            )
            raise PollError(exc.response.detail, job_id=job_id) from exc

        return JobStatus.model_validate(body)

    async def _fetch_with_error_classification(self, job_id: str) -> Dict[str, Any]:
        try:
            return await self._predictions.get(job_id)
        except UpstreamException as exc:
            if exc.response.is_transient:
                logger.debug(
                    f"[job:poll] transient error, will retry: status={exc.response.status} job_id={job_id}"
                )
                raise TransientUpstreamError(exc.response) from exc
            raise
