"""stripe-facility - Stripe resource clients and webhook signature verification."""

from stripe_facility.facility import StripeFacility

__version__ = "0.1.0"

__all__ = ["StripeFacility", "__version__"]
