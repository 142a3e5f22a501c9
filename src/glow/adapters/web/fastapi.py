# glow/adapters/web/fastapi.py
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Sequence, Type, TypeVar

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from glow.core.exceptions import EnhancementError, InvalidInputError
from glow.core.interfaces.http_client import HttpClientPort
from glow.core.logging_config import correlation_id_var
from glow.core.managers.enhancement_manager import EnhancementManager
from glow.core.models.enhancement import (
    EnhanceImageRequest,
    EnhancementResult,
    EnhanceUrlRequest,
    ErrorResponse,
    HealthResponse,
)
from glow.core.settings import logger

RequestModel = TypeVar("RequestModel", bound=BaseModel)


class CorrelationIdMiddleware:
    """Assigns a per-request id (X-Request-ID header override) and exposes it
    to logging.

    `receive` is passed through untouched so that `Request.is_disconnected`
    in the endpoint sees the client's `http.disconnect`.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        cid = Headers(scope=scope).get("x-request-id") or uuid.uuid4().hex[:12]

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)["X-Request-ID"] = cid
            await send(message)

        token = correlation_id_var.set(cid)
        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            correlation_id_var.reset(token)


# Driver adapter: it uses the core (EnhancementManager) but the core never
# imports it. Concrete infrastructure is assembled in main and passed in.
def create_app(
    enhancement_manager_factory: Callable[[HttpClientPort], EnhancementManager],
    http_client: HttpClientPort,
    service_name: str = "NaturalGlow API",
    cors_origins: Sequence[str] = ("*",),
    abort_on_disconnect: bool = True,
) -> FastAPI:
    """Create the FastAPI app.

    The HTTP client session lives for the lifetime of the app; the manager is
    built from it on startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with http_client as client:
            app.state.enhancement_manager = enhancement_manager_factory(client)
            logger.info(f"{service_name} ready")
            yield

    app = FastAPI(title=service_name, lifespan=lifespan)

    # The only caller is our own first-party app, so no origin restriction
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Added last so it wraps CORS and the id is on every response
    app.add_middleware(CorrelationIdMiddleware)

    @app.exception_handler(EnhancementError)
    async def enhancement_error_handler(request: Request, exc: EnhancementError):
        if exc.status_code >= 500:
            logger.error(
                f"[enhance] failed path={request.url.path} job_id={exc.job_id} "
                f"type={type(exc).__name__} details={exc.details}"
            )
            body = ErrorResponse(error=exc.error, details=exc.details)
        else:
            logger.info(f"[enhance] rejected path={request.url.path} error={exc.error}")
            body = ErrorResponse(error=exc.error)
        return JSONResponse(
            status_code=exc.status_code, content=body.model_dump(exclude_none=True)
        )

    async def read_body(request: Request, model: Type[RequestModel]) -> RequestModel:
        try:
            payload = await request.json()
        except ValueError:
            raise InvalidInputError("Invalid request body")
        if not isinstance(payload, dict):
            raise InvalidInputError("Invalid request body")
        try:
            return model.model_validate(payload)
        except ValidationError:
            raise InvalidInputError("Invalid request body")

    def abort_check(request: Request):
        return request.is_disconnected if abort_on_disconnect else None

    @app.get("/", response_model=HealthResponse)
    async def health():
        return HealthResponse(service=service_name)

    @app.post(
        "/enhance",
        response_model=EnhancementResult,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def enhance(request: Request):
        body = await read_body(request, EnhanceImageRequest)
        manager: EnhancementManager = request.app.state.enhancement_manager
        return await manager.enhance_image(body.image, should_abort=abort_check(request))

    @app.post(
        "/enhance-url",
        response_model=EnhancementResult,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def enhance_url(request: Request):
        body = await read_body(request, EnhanceUrlRequest)
        manager: EnhancementManager = request.app.state.enhancement_manager
        return await manager.enhance_url(body.url, should_abort=abort_check(request))

    return app
