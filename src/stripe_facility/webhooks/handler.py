"""WebhookHandler - aiohttp handlers for inbound Stripe webhooks.

Each request:
1. Reads the raw body (the signature covers the exact bytes)
2. Verifies the Stripe-Signature header with the endpoint's verifier
3. Answers 400 for malformed deliveries, 401 for signature or replay failures
4. Hands verified events to the optional callback and answers 200

Response bodies carry only the rejection class, never the computed digest,
the secret, or exception text.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping

import structlog
from aiohttp import web

from stripe_facility.observability.metrics import WEBHOOK_DISPATCH_ERRORS, WEBHOOK_VERIFICATIONS
from stripe_facility.webhooks.endpoints import WebhookEndpoint
from stripe_facility.webhooks.verifier import (
    Rejected,
    Verified,
    VerifiedEvent,
    WebhookVerifier,
)

logger = structlog.get_logger()

STRIPE_SIGNATURE_HEADER = "Stripe-Signature"

EventCallback = Callable[[WebhookEndpoint, VerifiedEvent], Awaitable[None]]


class WebhookHandler:
    """Handles webhook POSTs for every endpoint type that has a verifier.

    Routes:
        POST /webhooks/{endpoint} - e.g. /webhooks/invoice, /webhooks/customer
    """

    def __init__(
        self,
        verifiers: Mapping[WebhookEndpoint, WebhookVerifier],
        on_event: EventCallback | None = None,
        signature_header: str = STRIPE_SIGNATURE_HEADER,
        path_prefix: str = "/webhooks",
    ) -> None:
        """Initialize the handler.

        Args:
            verifiers: One verifier per served endpoint type.
            on_event: Awaited with each verified event.
            signature_header: Header carrying the signature.
            path_prefix: URL prefix of the webhook routes.
        """
        self._verifiers = dict(verifiers)
        self._on_event = on_event
        self._signature_header = signature_header
        self._path_prefix = path_prefix.rstrip("/")

    @property
    def endpoints(self) -> tuple[WebhookEndpoint, ...]:
        return tuple(self._verifiers)

    def register_routes(self, app: web.Application) -> None:
        """Register one POST route per endpoint type on an aiohttp application.

        Args:
            app: The aiohttp Application to add routes to.
        """
        for endpoint in self._verifiers:
            app.router.add_post(
                f"{self._path_prefix}/{endpoint.value}",
                self._make_route(endpoint),
            )
        logger.info(
            "Webhook routes registered",
            endpoints=[e.value for e in self._verifiers],
        )

    def _make_route(
        self, endpoint: WebhookEndpoint
    ) -> Callable[[web.Request], Awaitable[web.Response]]:
        async def route(request: web.Request) -> web.Response:
            return await self.handle(request, endpoint)

        return route

    async def handle(self, request: web.Request, endpoint: WebhookEndpoint) -> web.Response:
        """Verify one webhook delivery and answer it.

        Args:
            request: The incoming HTTP request.
            endpoint: Endpoint type the request was routed to.

        Returns:
            200 on success, 400/401 on rejection, 500 if the event callback fails.
        """
        verifier = self._verifiers[endpoint]
        body = await request.read()
        signature = request.headers.get(self._signature_header)

        result = verifier.verify(body, signature)
        WEBHOOK_VERIFICATIONS.labels(endpoint=endpoint.value, status=result.status.value).inc()

        if isinstance(result, Rejected):
            return self._reject(request, endpoint, result)

        return await self._accept(endpoint, result)

    def _reject(
        self,
        request: web.Request,
        endpoint: WebhookEndpoint,
        result: Rejected,
    ) -> web.Response:
        if result.status.is_authentication_failure:
            logger.warning(
                "Webhook authentication failed",
                endpoint=endpoint.value,
                status=result.status.value,
                remote=request.remote,
                signed_at=result.timestamp,
            )
        else:
            logger.info(
                "Webhook rejected",
                endpoint=endpoint.value,
                status=result.status.value,
                reason=result.reason,
            )
        return web.json_response(
            {"error": result.status.value},
            status=result.status.http_status,
        )

    async def _accept(self, endpoint: WebhookEndpoint, result: Verified) -> web.Response:
        event = result.event
        if event.event_type and not event.event_type.startswith(endpoint.event_prefixes):
            logger.info(
                "Event type not usually routed to this endpoint",
                endpoint=endpoint.value,
                event_type=event.event_type,
            )

        logger.info(
            "Webhook verified",
            endpoint=endpoint.value,
            event_id=event.event_id,
            event_type=event.event_type,
        )

        if self._on_event is not None:
            try:
                await self._on_event(endpoint, event)
            except Exception:
                # Stripe retries deliveries answered with a 5xx.
                WEBHOOK_DISPATCH_ERRORS.labels(endpoint=endpoint.value).inc()
                logger.exception(
                    "Webhook event callback failed",
                    endpoint=endpoint.value,
                    event_id=event.event_id,
                )
                return web.json_response({"error": "processing_failed"}, status=500)

        return web.json_response({"received": True})
