"""Webhook server."""

from stripe_facility.server.app import HANDLER_KEY, create_app, run_server

__all__ = ["HANDLER_KEY", "create_app", "run_server"]
