"""aiohttp application serving the Stripe webhook endpoints."""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog
from aiohttp import web

from stripe_facility.core.config import FacilitySettings
from stripe_facility.observability.metrics import generate_metrics, get_content_type
from stripe_facility.webhooks.endpoints import build_verifiers
from stripe_facility.webhooks.handler import EventCallback, WebhookHandler

logger = structlog.get_logger()

HANDLER_KEY = web.AppKey("webhook_handler", WebhookHandler)


async def _handle_health_check(request: web.Request) -> web.Response:
    """Health check endpoint. Returns only the status."""
    return web.json_response({"status": "healthy"})


async def _handle_metrics(request: web.Request) -> web.Response:
    """Prometheus metrics endpoint."""
    return web.Response(
        body=generate_metrics(),
        headers={"Content-Type": get_content_type()},
    )


def create_app(
    settings: FacilitySettings,
    on_event: EventCallback | None = None,
    clock: Callable[[], float] = time.time,
) -> web.Application:
    """Build the webhook application.

    Args:
        settings: Facility settings holding the webhook secrets.
        on_event: Awaited with each verified event.
        clock: Time source for timestamp checks.

    Returns:
        aiohttp Application with /webhooks/{endpoint}, /healthz and /metrics.
    """
    app = web.Application()
    handler = WebhookHandler(build_verifiers(settings, clock=clock), on_event=on_event)
    handler.register_routes(app)
    app[HANDLER_KEY] = handler

    app.router.add_get("/healthz", _handle_health_check)
    app.router.add_get("/metrics", _handle_metrics)

    if not handler.endpoints:
        logger.warning("No webhook secrets configured, no webhook endpoint is served")
    return app


def run_server(settings: FacilitySettings, on_event: EventCallback | None = None) -> None:
    """Serve the webhook application until interrupted."""
    app = create_app(settings, on_event=on_event)
    logger.info(
        "Starting webhook server",
        host=settings.host,
        port=settings.port,
        environment=settings.environment.value,
    )
    web.run_app(app, host=settings.host, port=settings.port, print=None)
