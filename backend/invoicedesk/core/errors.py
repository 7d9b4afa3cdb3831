"""
Domain errors raised by the crud and service layers.

Endpoints translate these into HTTP 400 responses; they subclass ValueError
so callers that only care about "invalid input" can catch that.
"""


class CostingError(ValueError):
    """Invalid costing operation (empty save, unknown row, no item selected)."""


class PaymentError(ValueError):
    """Payment rejected (non-positive amount, overpayment)."""


class SubscriptionError(ValueError):
    """Action blocked by the organization's subscription or plan limits."""
