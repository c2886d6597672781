"""
Boundary Normalization

Payment sources disagree on field names (``date`` vs ``paymentDate``,
``receipts`` vs ``actualReceipts``). Records are mapped to the canonical
Payment shape once, here, so the calculator and rollup never see variants.
"""

import logging

from .models import Payment, Policy

logger = logging.getLogger(__name__)

# Legacy field name → canonical field name
FIELD_ALIASES = {
    "paymentDate": "date",
    "actualReceipts": "receipts",
}


def normalize_payment(raw: dict) -> Payment:
    """
    Build a canonical Payment from a loosely-shaped dict.

    The canonical name wins when both it and its alias are present and
    truthy. Raises ValueError if a numeric field cannot be coerced.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Payment record must be an object, got: {type(raw).__name__}")

    data = dict(raw)
    for alias, canonical in FIELD_ALIASES.items():
        if alias in data:
            alias_value = data.pop(alias)
            if not data.get(canonical):
                data[canonical] = alias_value

    try:
        return Payment.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid payment {raw.get('id', '<no id>')}: {e}") from e


def normalize_payments(raws: list[dict]) -> list[Payment]:
    """Normalize a batch, dropping records that cannot be normalized."""
    payments = []
    for raw in raws:
        try:
            payments.append(normalize_payment(raw))
        except ValueError as e:
            logger.debug("Dropping payment record: %s", e)
    return payments


def normalize_policy(raw: dict) -> Policy:
    """Build a Policy from its external shape. Raises ValueError on bad numbers."""
    try:
        return Policy.from_dict(raw)
    except (AttributeError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid policy: {e}") from e


def index_policies(raws: list[dict]) -> dict[str, Policy]:
    """Policies keyed by product id."""
    policies = {}
    for raw in raws:
        policy = normalize_policy(raw)
        policies[policy.product_id] = policy
    return policies
