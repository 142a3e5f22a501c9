from typing import Any, Awaitable, Callable, Sequence, Type

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from glow.core.settings import logger


def _log_before_sleep(retry_state: RetryCallState) -> None:
    logger.debug(
        f"[retry] {getattr(retry_state.fn, '__name__', 'call')} "
        f"try={retry_state.attempt_number} error={retry_state.outcome.exception()!r}"
    )


class TenacityRetryAdapter:
    """RetryPort backed by tenacity.

    The JobPoller wraps each status query in `execute` and passes its
    PollerConfig values (attempts, wait_initial, wait_max, exception_types)
    per call; the constructor values apply when a caller leaves them out.
    """

    def __init__(
        self,
        attempts: int = 3,
        wait_initial: float = 0.2,
        wait_max: float = 1.0,
        exception_types: Sequence[Type[Exception]] = (Exception,),
    ) -> None:
        self.attempts = attempts
        self.wait_initial = wait_initial
        self.wait_max = wait_max
        self.exception_types = tuple(exception_types)

    def _policy(self, overrides: dict) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(overrides.pop("attempts", self.attempts)),
            wait=wait_exponential(
                multiplier=overrides.pop("wait_initial", self.wait_initial),
                max=overrides.pop("wait_max", self.wait_max),
            ),
            retry=retry_if_exception_type(
                tuple(overrides.pop("exception_types", self.exception_types))
            ),
            before_sleep=_log_before_sleep,
            reraise=True,
        )

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        retrying = self._policy(kwargs)
        return await retrying(func, *args, **kwargs)
