"""
Commission Amount Strategies

Rollups need one commission figure per payment. Which figure depends on
what data the payment carries:

- ExactCommissionStrategy: the payments service already priced the payment
  with the full calculator and attached the pool amount.
- EstimationStrategy: no policy context at rollup time, so a flat 3% of APE
  stands in.
"""

from ..models import Payment

# Flat estimate applied when a payment carries no priced commission
FALLBACK_COMMISSION_RATE = 0.03


class ExactCommissionStrategy:
    """Uses the commission amount attached to the payment."""

    name = "exact"

    def amount(self, payment: Payment) -> float:
        return payment.commission_amount


class EstimationStrategy:
    """Estimates commission as a flat share of APE."""

    name = "estimate"
    RATE = FALLBACK_COMMISSION_RATE

    def amount(self, payment: Payment) -> float:
        return payment.ape * self.RATE


EXACT = ExactCommissionStrategy()
ESTIMATE = EstimationStrategy()


def select_strategy(payment: Payment) -> ExactCommissionStrategy | EstimationStrategy:
    """Exact when a commission amount is attached (zero included), else estimate."""
    # The legacy dashboard rollup treated an attached 0 as missing and
    # estimated it; here only an absent amount falls back.
    if payment.commission_amount is not None:
        return EXACT
    return ESTIMATE
