"""EnhancementManager: bridges one synchronous HTTP request to a remote prediction.

Responsibilities:
1. Validate the inbound image reference (inline data or URL).
2. Build the JobRequest from the configured model backend.
3. Submit exactly one prediction (never retried).
4. Hand the prediction id to the JobPoller.
5. Unwrap the output into a single URL.
"""

from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import urlsplit

from glow.core.exceptions import (
    EnhancementError,
    InvalidInputError,
    JobCancelledError,
    PollError,
    SubmissionError,
    UpstreamException,
)
from glow.core.interfaces.predictions import PredictionsPort
from glow.core.models.backend import ModelBackend
from glow.core.models.enhancement import EnhancementResult
from glow.core.models.job import JobRequest
from glow.core.services.job_poller import AbortCheck, JobPoller
from glow.core.settings import logger

DATA_URI_PREFIX = "data:"
# raw payloads from the iOS client are JPEG
DEFAULT_INLINE_MIME = "image/jpeg"


def to_data_uri(image: str, mime_type: str = DEFAULT_INLINE_MIME) -> str:
    """Wrap a raw base64 payload into a data URI; pass data URIs through."""
    if image.startswith(DATA_URI_PREFIX):
        return image
    return f"data:{mime_type};base64,{image}"


def first_output(output: Any) -> Any:
    """Models return either a single reference or an ordered list of them."""
    if isinstance(output, (list, tuple)):
        return output[0] if output else None
    return output


def redact_url(url: str) -> str:
    """Scheme, host and path only; signed URLs carry credentials in the query."""
    parts = urlsplit(url.strip())
    if not parts.netloc:
        return "<unparsed url>"
    return f"{parts.scheme}://{parts.hostname or ''}{parts.path}"


class EnhancementManager:
    def __init__(
        self,
        predictions: PredictionsPort,
        poller: JobPoller,
        backend: ModelBackend,
        cancel_on_disconnect: bool = True,
    ) -> None:
        self._predictions = predictions
        self._poller = poller
        self.backend = backend
        self.cancel_on_disconnect = cancel_on_disconnect

    def build_job_request(self, image_ref: str) -> JobRequest:
        return JobRequest.for_backend(self.backend, image_ref)

    async def enhance_image(
        self, image: Optional[str], should_abort: Optional[AbortCheck] = None
    ) -> EnhancementResult:
        if not image or not image.strip():
            raise InvalidInputError("No image provided")
        logger.info(f"[enhance] processing inline image chars={len(image)}")
        return await self._run(to_data_uri(image.strip()), should_abort)

    async def enhance_url(
        self, url: Optional[str], should_abort: Optional[AbortCheck] = None
    ) -> EnhancementResult:
        if not url or not url.strip():
            raise InvalidInputError("No URL provided")
        logger.info(f"[enhance] processing image from url={redact_url(url)}")
        return await self._run(url.strip(), should_abort)

    async def _run(
        self, image_ref: str, should_abort: Optional[AbortCheck]
    ) -> EnhancementResult:
        job_request = self.build_job_request(image_ref)
        try:
            job_id = await self._submit(job_request)
            try:
                status = await self._poller.poll(job_id, should_abort)
            except JobCancelledError:
                await self._cancel_remote(job_id)
                raise

            enhanced_url = first_output(status.output)
            if not isinstance(enhanced_url, str) or not enhanced_url:
                raise PollError("Prediction returned no output", job_id=job_id)
            logger.info(f"[enhance] complete job_id={job_id} output={enhanced_url}")
            return EnhancementResult(enhanced_url=enhanced_url)

        except EnhancementError:
            raise
        except Exception as exc:
            logger.error(f"[enhance] unexpected error: {exc!r}")
            raise EnhancementError(str(exc) or type(exc).__name__) from exc

    async def _submit(self, job_request: JobRequest) -> str:
        try:
            prediction = await self._predictions.submit(job_request)
        except UpstreamException as exc:
            logger.error(
                f"[job:submit] transport error status={exc.response.status} title={exc.response.title}"
            )
            raise SubmissionError(exc.response.detail) from exc

        logger.debug(f"[job:submit] response={json.dumps(prediction, default=str)}")

        error = prediction.get("error")
        job_id = prediction.get("id")
        if error:
            raise SubmissionError(str(error))
        if not job_id:
            raise SubmissionError(
                f"Failed to create prediction: {json.dumps(prediction, default=str)}"
            )

        logger.info(f"[job:submit] prediction created job_id={job_id}")
        return str(job_id)

    async def _cancel_remote(self, job_id: str) -> None:
        if not self.cancel_on_disconnect:
            logger.info(f"[job:cancel] leaving orphaned prediction job_id={job_id}")
            return
        try:
            await self._predictions.cancel(job_id)
            logger.info(f"[job:cancel] cancel requested job_id={job_id}")
        except UpstreamException as exc:
            logger.warning(
                f"[job:cancel] cancel failed job_id={job_id} status={exc.response.status}"
            )
