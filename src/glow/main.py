# main.py
import uvicorn

from glow.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from glow.adapters.replicate_predictions_adapter import ReplicatePredictionsAdapter
from glow.adapters.retry_tenacity import TenacityRetryAdapter
from glow.adapters.web.fastapi import create_app
from glow.core.config import PollerConfig
from glow.core.interfaces.http_client import HttpClientPort
from glow.core.logging_config import configure_logging
from glow.core.managers.enhancement_manager import EnhancementManager
from glow.core.models.backend import get_backend
from glow.core.services.job_poller import JobPoller
from glow.core.settings import GlowSettings, app_settings, logger


# main lives at the outermost layer (not in core)
# Instantiates all the concrete adapters
# Wires dependencies together
# Starts the application

def build_app(settings: GlowSettings = app_settings):
    settings.validate_startup()

    backend = get_backend(settings.GLOW_MODEL_BACKEND)
    poller_config = PollerConfig.from_app_settings(settings)
    http_client = AioHttpClientAdapter(total_timeout=settings.GLOW_HTTP_TIMEOUT)

    def enhancement_manager_factory(client: HttpClientPort) -> EnhancementManager:
        predictions = ReplicatePredictionsAdapter(
            client,
            api_token=settings.GLOW_REPLICATE_API_TOKEN,
            base_url=settings.GLOW_REPLICATE_API_URL,
        )
        poller = JobPoller(
            predictions,
            poller_config,
            retry_port=TenacityRetryAdapter(attempts=poller_config.status_retry_attempts),
        )
        return EnhancementManager(
            predictions,
            poller,
            backend,
            cancel_on_disconnect=settings.GLOW_CANCEL_ON_DISCONNECT,
        )

    return create_app(
        enhancement_manager_factory=enhancement_manager_factory,
        http_client=http_client,
        service_name=settings.GLOW_SERVICE_NAME,
        cors_origins=settings.GLOW_CORS_ORIGINS,
    )


def main():
    # Central logging configuration BEFORE building the app so uvicorn adopts level/format
    configure_logging(app_settings.GLOW_LOG_LEVEL)
    app_settings.print_settings(logger)

    app = build_app(app_settings)

    logger.info(
        f"{app_settings.GLOW_SERVICE_NAME} running on http://{app_settings.GLOW_HOST}:{app_settings.GLOW_PORT}"
    )
    # Let uvicorn inherit existing logging (separate sinks & correlation ids)
    uvicorn.run(
        app,
        host=app_settings.GLOW_HOST,
        port=app_settings.GLOW_PORT,
        log_config=None,
        log_level=str(app_settings.GLOW_LOG_LEVEL).lower(),
    )


if __name__ == "__main__":
    main()
