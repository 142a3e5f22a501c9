from typing import Any, Dict

from pydantic import SecretStr

from glow.core.interfaces.http_client import HttpClientPort
from glow.core.interfaces.predictions import PredictionsPort
from glow.core.models.job import JobRequest
from glow.core.settings import logger


class ReplicatePredictionsAdapter(PredictionsPort):
    """Replicate predictions API over an HttpClientPort.

    The bearer token is injected here; nothing reads it from process state.
    """

    def __init__(
        self,
        http_client: HttpClientPort,
        api_token: SecretStr,
        base_url: str = "https://api.replicate.com/v1",
        timeout: float | None = None,
    ) -> None:
        self._http = http_client
        self._token = api_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token.get_secret_value()}",
            "Content-Type": "application/json",
        }

    def _prediction_url(self, job_id: str = "") -> str:
        url = f"{self._base_url}/predictions"
        return f"{url}/{job_id}" if job_id else url

    async def submit(self, job_request: JobRequest) -> Dict[str, Any]:
        resp = await self._http.post(
            self._prediction_url(),
            json=job_request.to_payload(),
            timeout=self._timeout,
            headers=self._headers(),
        )
        return self._body_of(resp)

    async def get(self, job_id: str) -> Dict[str, Any]:
        return await self._http.get(
            self._prediction_url(job_id),
            timeout=self._timeout,
            headers=self._headers(),
        )

    async def cancel(self, job_id: str) -> Dict[str, Any]:
        resp = await self._http.post(
            f"{self._prediction_url(job_id)}/cancel",
            json=None,
            timeout=self._timeout,
            headers=self._headers(),
        )
        return self._body_of(resp)

    @staticmethod
    def _body_of(resp: Dict[str, Any]) -> Dict[str, Any]:
        """Return the JSON body of a POST; non-JSON bodies become an error entry."""
        body = resp.get("body")
        status = resp.get("status")
        if isinstance(body, dict):
            if status and status >= 400:
                logger.warning(f"[replicate] POST returned status={status} body={body}")
            return body
        logger.warning(f"[replicate] non-JSON POST response status={status}")
        text = str(body or "").strip()[:500]
        return {"error": text or f"Unexpected response from prediction API (HTTP {status})"}
