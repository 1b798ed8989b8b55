import logging
from typing import Optional

from fastapi import FastAPI, Request, Response, status

from webhook_signature.config import Settings, get_settings
from webhook_signature.logging_utils import setup_logging, RequestLoggingMiddleware
from webhook_signature.metrics import get_metrics, get_metrics_content_type
from webhook_signature.middleware import SignatureValidationMiddleware
from webhook_signature.schemas import ErrorResponse, HealthResponse, WebhookResponse


logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the webhook receiver.

    Requests to the configured protected paths are rejected with 401 unless
    they carry a valid signature and a fresh timestamp.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Webhook Signature Receiver",
        description="Receives signed webhooks and rejects forged or stale requests",
        version="1.0.0",
    )

    validator = settings.build_validator()
    logger.info(f"Signature validation enabled: {validator!r}")

    # Added first so RequestLoggingMiddleware wraps it and sees the result
    app.add_middleware(
        SignatureValidationMiddleware,
        validator=validator,
        protected_paths=settings.PROTECTED_PATHS,
    )
    app.add_middleware(RequestLoggingMiddleware)

    # =========================================================================
    # Health Check Routes
    # =========================================================================

    @app.get("/health/live", response_model=HealthResponse)
    async def health_live() -> HealthResponse:
        """Liveness probe - always returns 200 once the app is running."""
        return HealthResponse(status="ok")

    @app.get("/health/ready", response_model=HealthResponse)
    async def health_ready(response: Response) -> HealthResponse:
        """
        Readiness probe - returns 200 only if SIGNING_KEY is set (non-empty),
        otherwise 503 (Service Unavailable).
        """
        if not settings.SIGNING_KEY.get_secret_value():
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            return HealthResponse(status="not_ready", reason="SIGNING_KEY not configured")
        return HealthResponse(status="ready")

    # =========================================================================
    # Webhook Route
    # =========================================================================

    @app.post(
        "/webhook",
        response_model=WebhookResponse,
        responses={
            401: {"model": ErrorResponse, "description": "Invalid signature"},
            400: {"model": ErrorResponse, "description": "Unreadable body"},
        }
    )
    async def webhook(request: Request) -> WebhookResponse:
        """
        Accept a signed webhook.

        Headers:
            - MessageBird-Request-Timestamp: Unix epoch seconds
            - MessageBird-Signature: base64 HMAC-SHA256, see webhook_signature.signature
        """
        body = await request.body()
        logger.info(f"Webhook accepted, body size: {len(body)} bytes")
        return WebhookResponse(status="ok", bytes=len(body))

    # =========================================================================
    # Metrics Route
    # =========================================================================

    @app.get("/metrics")
    async def metrics() -> Response:
        """Expose Prometheus-style metrics."""
        return Response(
            content=get_metrics(),
            media_type=get_metrics_content_type()
        )

    return app
