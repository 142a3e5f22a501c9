from typing import Literal, Optional

from pydantic import BaseModel


class EnhanceImageRequest(BaseModel):
    # raw base64 (assumed JPEG) or a complete data URI
    image: Optional[str] = None

    model_config = {"extra": "ignore"}


class EnhanceUrlRequest(BaseModel):
    url: Optional[str] = None

    model_config = {"extra": "ignore"}


class EnhancementResult(BaseModel):
    success: Literal[True] = True
    enhanced_url: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    service: str
