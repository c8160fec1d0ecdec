"""FastAPI application entry point for the GitHub to Feishu relay.

This module provides the application factory for the relay service. It
receives GitHub workflow_job webhooks, hands them to the WebhookHandler, and
maps handler outcomes and errors to HTTP responses:

- 200 {"success": true}          a card was delivered
- 200 {"message": "Event ignored"}  not a completed workflow_job
- 401 {"error": "Invalid signature"}
- 500 {"error": ..., "details": ...}  bad payload, delivery or internal error

Run locally with ``python -m src.relay.main`` or
``uvicorn --factory src.relay.main:create_app``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from src.relay.config import RelaySettings, get_settings
from src.relay.errors import (
    FeishuDeliveryError,
    InvalidSignatureError,
    MalformedPayloadError,
    RelayError,
)
from src.relay.feishu.client import FeishuClient
from src.relay.metrics import Outcome, record_outcome, render_metrics
from src.relay.webhook.handler import WebhookHandler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

GITHUB_EVENT_HEADER = "x-github-event"
GITHUB_SIGNATURE_HEADER = "x-hub-signature-256"
GITHUB_DELIVERY_HEADER = "x-github-delivery"

_ERROR_OUTCOMES = {
    InvalidSignatureError: Outcome.UNAUTHORIZED,
    MalformedPayloadError: Outcome.MALFORMED,
    FeishuDeliveryError: Outcome.DELIVERY_FAILED,
}


def _redact_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters, or
        "<not set>" for missing values.
    """
    if not value:
        return "<not set>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: RelaySettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Relay configuration:")
    logger.info(
        f"  GitHub Webhook Secret: {_redact_secret(settings.github_webhook_secret)}"
    )
    logger.info(
        f"  Feishu Webhook URL: {_redact_secret(settings.feishu_webhook_url, 32)}"
    )
    logger.info(f"  Feishu Secret: {_redact_secret(settings.feishu_secret)}")
    logger.info(
        f"  Feishu Signing: {'enabled' if settings.signing_enabled else 'disabled'}"
    )
    logger.info(f"  Feishu Timeout Seconds: {settings.feishu_timeout_seconds}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")

    if not settings.verification_enabled:
        logger.warning(
            "GITHUB_WEBHOOK_SECRET is not set: accepting unsigned webhooks"
        )
    if settings.feishu_webhook_url is None:
        logger.warning(
            "FEISHU_WEBHOOK_URL is not set: completed jobs cannot be delivered"
        )


def create_app(
    settings: Optional[RelaySettings] = None,
    feishu_client: Optional[FeishuClient] = None,
) -> FastAPI:
    """Build the relay application.

    Args:
        settings: Relay configuration. Read from the environment if omitted.
        feishu_client: Delivery client. Built from settings if omitted.

    Returns:
        FastAPI: The configured application.
    """
    if settings is None:
        settings = get_settings()
    logging.getLogger("src.relay").setLevel(settings.log_level)

    handler = WebhookHandler(settings=settings, feishu_client=feishu_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Log configuration on startup and close the HTTP client on shutdown."""
        logger.info("Relay starting up...")
        _log_configuration(settings)

        yield

        logger.info("Relay shutting down...")
        await handler.close()
        logger.info("Relay shutdown complete")

    app = FastAPI(
        title="GitHub Feishu Relay",
        description="Relays GitHub workflow_job completions to Feishu cards",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.webhook_handler = handler

    @app.get("/health")
    async def health():
        """Liveness probe endpoint."""
        return {"status": "healthy"}

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=render_metrics(), media_type=CONTENT_TYPE_LATEST)

    @app.post("/api/github-webhook")
    @app.post("/webhooks/github")
    async def github_webhook(request: Request):
        """GitHub webhook receiver endpoint.

        The body is read as raw bytes before anything parses it, so the
        signature is checked against exactly what GitHub sent.
        """
        raw_body = await request.body()
        event_type = request.headers.get(GITHUB_EVENT_HEADER)
        signature = request.headers.get(GITHUB_SIGNATURE_HEADER)
        delivery_id = request.headers.get(GITHUB_DELIVERY_HEADER)

        try:
            result = await handler.handle(event_type, signature, raw_body)
        except RelayError as e:
            record_outcome(_ERROR_OUTCOMES.get(type(e), Outcome.ERROR))
            logger.error(
                "Webhook failed: delivery=%s event=%s status=%s error=%s",
                delivery_id,
                event_type,
                e.status_code,
                e,
            )
            return JSONResponse(status_code=e.status_code, content=e.to_response())
        except Exception as e:
            record_outcome(Outcome.ERROR)
            logger.exception(
                "Unexpected error handling webhook delivery=%s: %s", delivery_id, e
            )
            return JSONResponse(
                status_code=500,
                content={"error": "Server error", "details": str(e)},
            )

        record_outcome(Outcome.PROCESSED if result.delivered else Outcome.IGNORED)
        return JSONResponse(status_code=result.status_code, content=result.body)

    return app


if __name__ == "__main__":
    import uvicorn

    dev_settings = get_settings()
    uvicorn.run(
        "src.relay.main:create_app",
        factory=True,
        host=dev_settings.host,
        port=dev_settings.port,
    )
