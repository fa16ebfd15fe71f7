from stripe_facility.observability.metrics import (
    API_CALL_DURATION,
    API_CALLS,
    WEBHOOK_DISPATCH_ERRORS,
    WEBHOOK_VERIFICATIONS,
    generate_metrics,
    get_content_type,
)

__all__ = [
    # Metrics
    "WEBHOOK_VERIFICATIONS",
    "WEBHOOK_DISPATCH_ERRORS",
    "API_CALLS",
    "API_CALL_DURATION",
    "generate_metrics",
    "get_content_type",
]
