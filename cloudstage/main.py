from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cloudstage.api.v1.router import router as api_router
from cloudstage.core.config import Settings, get_settings
from cloudstage.core.container import ServiceContainer, build_container
from cloudstage.core.exceptions import (
    AuthenticationError,
    CloudStageError,
    ConfigurationError,
    InvalidInput,
    NotFoundError,
    ProviderError,
    PushDeliveryError,
    StoreWriteError,
    WebhookPayloadError,
)
from cloudstage.core.logging import setup_logging
from cloudstage.models.common import ErrorResponse

logger = logging.getLogger(__name__)

# status, error code, client-facing message (None = use the exception's own message)
_ERROR_MAP: dict[type[CloudStageError], tuple[int, str, str | None]] = {
    InvalidInput: (400, "invalid_input", None),
    AuthenticationError: (401, "invalid_signature", "Invalid signature"),
    NotFoundError: (404, "not_found", None),
    ConfigurationError: (500, "configuration_error", "Payment system is not configured. Please contact support."),
    WebhookPayloadError: (500, "webhook_processing_failed", "Webhook processing failed"),
    StoreWriteError: (500, "store_write_failed", "Could not save your booking. Please try again."),
    ProviderError: (502, "provider_error", None),
    PushDeliveryError: (502, "push_delivery_failed", "Failed to send notifications."),
}


async def cloudstage_error_handler(request: Request, exc: CloudStageError) -> JSONResponse:
    status, code, message = 500, "internal_error", "Something went wrong. Please try again."
    for exc_type in type(exc).__mro__:
        if exc_type in _ERROR_MAP:
            status, code, message = _ERROR_MAP[exc_type]
            break

    if status >= 500:
        logger.error("%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    else:
        logger.warning("%s %s rejected: %s: %s", request.method, request.url.path, type(exc).__name__, exc)

    body = ErrorResponse(error=code, message=message if message is not None else str(exc))
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


def create_app(
    settings: Settings | None = None,
    *,
    services: ServiceContainer | None = None,
) -> FastAPI:
    """
    Build the API. Pass a ready ServiceContainer to skip building one at startup.
    """
    settings = settings or (services.settings if services else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(settings)
        owned = None
        if getattr(app.state, "services", None) is None:
            owned = build_container(settings)
            app.state.services = owned

        yield

        # Shutdown
        if owned is not None:
            await owned.close()

    app = FastAPI(title="CloudStage API", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    app.add_exception_handler(CloudStageError, cloudstage_error_handler)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
