from typing import Any, Awaitable, Callable, Protocol


class RetryPort(Protocol):
    """Retries a single async call on transient failures.

    The poller uses it around each status query so that a dropped connection
    or a 502 from the prediction API does not end the poll loop. Submission
    calls never go through it.
    """

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:  # pragma: no cover - protocol
        """Run `func(*args, **kwargs)`, retrying per the adapter's policy.

        Optional kw overrides: attempts, wait_initial, wait_max, exception_types.
        The last exception is re-raised once attempts are exhausted.
        """
        ...
