from typing import Optional

from glow.core.models.upstream_problem import UpstreamProblem


class UpstreamException(Exception):
    """Raised by HTTP adapters when the remote service cannot be reached or
    answers with something we cannot use."""

    def __init__(self, response: UpstreamProblem):
        self.response = response
        super().__init__(f"{response.title}: {response.detail}")


class ConfigurationError(Exception):
    """Settings are missing or inconsistent; raised at startup."""


# Request-level exceptions. All of them are rendered by the web adapter into
# the uniform error body.

class EnhancementError(Exception):
    """Base exception for a failed enhancement request.

    Attributes:
        details: Human-readable description echoed to the caller
        status_code: HTTP status the web adapter responds with
        job_id: Remote prediction id, when one was created
    """

    status_code: int = 500
    error: str = "Enhancement failed"

    def __init__(self, details: str, job_id: Optional[str] = None):
        self.details = details
        self.job_id = job_id
        super().__init__(details)


class InvalidInputError(EnhancementError):
    """Missing or empty input. The message itself becomes the error field."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.error = message


class SubmissionError(EnhancementError):
    """The prediction API rejected the job or returned no job id."""


class PollError(EnhancementError):
    """The prediction reached `failed` or `canceled`, or could not be queried."""


class JobTimeoutError(EnhancementError):
    """Attempt ceiling reached without a terminal status.

    Attributes:
        attempts: Number of status queries issued
    """

    def __init__(self, job_id: str, attempts: int):
        self.attempts = attempts
        super().__init__("Prediction timeout", job_id=job_id)


class JobCancelledError(EnhancementError):
    """The caller went away while the prediction was still being polled."""

    def __init__(self, job_id: str, attempts: int):
        self.attempts = attempts
        super().__init__("Client disconnected before the prediction finished", job_id=job_id)
