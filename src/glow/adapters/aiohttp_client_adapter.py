# glow/adapters/aiohttp_client_adapter.py
import asyncio
from typing import Any, Dict, Optional

import aiohttp

from glow.core.exceptions import UpstreamException
from glow.core.interfaces.http_client import HttpClientPort
from glow.core.models.upstream_problem import UpstreamProblem
from glow.core.settings import logger


class AioHttpClientAdapter(HttpClientPort):
    def __init__(
        self,
        total_timeout: float = 30.0,
        sock_connect_timeout: float = 10.0,
    ):
        self._session: Optional[aiohttp.ClientSession] = None
        # Every request gets an explicit timeout; aiohttp's default is 5 minutes
        self._default_total = total_timeout
        self._default_sock_connect = sock_connect_timeout
        self._default_client_timeout = aiohttp.ClientTimeout(
            total=self._default_total,
            sock_connect=self._default_sock_connect,
        )

    async def __aenter__(self):
        """Async context manager entry"""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")
        return self._session

    def _client_timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        if timeout is None:
            return self._default_client_timeout
        # Keep the connect limit, apply the caller's total
        return aiohttp.ClientTimeout(total=timeout, sock_connect=self._default_sock_connect)

    async def get(
        self,
        url: str,
        timeout: float | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        session = self._require_session()
        try:
            async with session.get(
                url, timeout=self._client_timeout(timeout), headers=headers
            ) as response:
                try:
                    response_data = await response.json()
                except aiohttp.ContentTypeError:
                    response_text = await response.text()
                    if response.status >= 400:
                        response.raise_for_status()
                    logger.error(
                        "Invalid JSON response from remote service. URL: %s, Content: %s",
                        url,
                        response_text[:500],
                    )
                    raise UpstreamException(
                        UpstreamProblem(
                            title="Invalid Response Content",
                            status=502,
                            detail=(
                                "The response from the remote service was not valid JSON"
                                f": '{response_text[:100]}'"
                            ),
                            url=url,
                        )
                    )

                if response.status >= 400:
                    raise UpstreamException(
                        UpstreamProblem(
                            title="Upstream HTTP Error",
                            status=response.status,
                            detail=self._error_detail(response_data, response.status),
                            url=url,
                        )
                    )
                return response_data

        except UpstreamException:
            raise
        except aiohttp.ClientResponseError as client_response_error:
            raise self._map_response_error(url, client_response_error) from client_response_error
        except Exception as exc:
            raise self._map_transport_error("GET", url, exc) from exc

    async def post(
        self,
        url: str,
        json: Dict[str, Any] | None,
        timeout: float | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        session = self._require_session()
        try:
            async with session.post(
                url, json=json, timeout=self._client_timeout(timeout), headers=headers
            ) as response:
                try:
                    body = await response.json()
                except aiohttp.ContentTypeError:
                    body = await response.text()

                # No raise_for_status here; the caller inspects status and body
                return {
                    "status": response.status,
                    "headers": dict(response.headers),
                    "body": body,
                }

        except Exception as exc:
            raise self._map_transport_error("POST", url, exc) from exc

    @staticmethod
    def _error_detail(body: Any, status: int) -> str:
        if isinstance(body, dict):
            for key in ("detail", "error", "title"):
                if body.get(key):
                    return str(body[key])
        return f"The remote service returned an HTTP error: {status}"

    def _map_response_error(
        self, url: str, error: aiohttp.ClientResponseError
    ) -> UpstreamException:
        if error.status == 401:
            logger.warning(
                "Authentication failed when requesting remote service. URL: %s, Error: %s",
                url,
                str(error),
            )
            return UpstreamException(
                UpstreamProblem(
                    title="Authentication Failed",
                    status=401,
                    detail="Authentication with the remote service failed.",
                    url=url,
                )
            )

        logger.error(
            "HTTP error when requesting remote service. URL: %s, Status: %s, Error: %s",
            url,
            error.status,
            str(error),
        )
        return UpstreamException(
            UpstreamProblem(
                title="Upstream HTTP Error",
                status=error.status,
                detail=f"The remote service returned an HTTP error: {error.status}",
                url=url,
            )
        )

    def _map_transport_error(self, method: str, url: str, error: Exception) -> UpstreamException:
        if isinstance(error, asyncio.TimeoutError):
            logger.error("Timeout on %s to remote service. URL: %s", method, url)
            return UpstreamException(
                UpstreamProblem(
                    title="Upstream Timeout",
                    status=504,
                    detail="The request to the remote service timed out.",
                    url=url,
                )
            )

        if isinstance(error, aiohttp.ClientError):
            logger.error(
                "Connection error on %s to remote service. URL: %s, Error: %s",
                method,
                url,
                str(error),
            )
            return UpstreamException(
                UpstreamProblem(
                    title="Upstream Connection Error",
                    status=502,
                    detail="There was a connection error with the remote service.",
                    url=url,
                )
            )

        logger.error(
            "Unexpected error on %s to remote service. URL: %s, Error: %s",
            method,
            url,
            str(error),
        )
        return UpstreamException(
            UpstreamProblem(
                title="Internal Server Error",
                status=500,
                detail="An unexpected error occurred while contacting the remote service.",
                url=url,
            )
        )
