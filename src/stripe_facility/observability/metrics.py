from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

WEBHOOK_VERIFICATIONS = Counter(
    "stripe_facility_webhook_verifications_total",
    "Webhook deliveries by verification outcome",
    ["endpoint", "status"],
)

# Event callback failures after a successful verification
WEBHOOK_DISPATCH_ERRORS = Counter(
    "stripe_facility_webhook_dispatch_errors_total",
    "Webhook event callbacks that raised",
    ["endpoint"],
)

API_CALLS = Counter(
    "stripe_facility_api_calls_total",
    "Stripe API calls by resource and outcome",
    ["resource", "operation", "outcome"],  # outcome: success or error kind
)

API_CALL_DURATION = Histogram(
    "stripe_facility_api_call_duration_seconds",
    "Stripe API call latency",
    ["resource"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


def generate_metrics() -> bytes:
    return generate_latest()


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST
