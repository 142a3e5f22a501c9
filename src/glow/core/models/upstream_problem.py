from typing import Optional

from pydantic import BaseModel


class UpstreamProblem(BaseModel):
    """Transport-level failure talking to the prediction API."""

    title: str
    status: int
    detail: str
    url: Optional[str] = None

    @property
    def is_transient(self) -> bool:
        return self.status in (502, 503, 504)
