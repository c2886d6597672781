"""
Commission Calculator

Turns a payment and its product policy into a commission split.

Pipeline:
1. Choose the commission base (APE or Receipts) against the policy threshold
2. Deduct the house margin to get the pool
3. Split the pool across the four roles

All steps are plain float arithmetic with no rounding and no validation;
rounding for display belongs to the presentation layer.
"""

import dataclasses

from ..models import (
    METHOD_APE,
    METHOD_RECEIPTS,
    BaseSelection,
    CommissionResult,
    Payment,
    Policy,
    RoleSplit,
)


def compute_base(payment: Payment, policy: Policy) -> BaseSelection:
    """
    Select the commission base for a payment.

    threshold = APE × thresholdMultiplier
    - receipts <= threshold → APE × rate
    - receipts >  threshold → Receipts × rate

    Equality goes to APE. With APE = 0 the threshold is 0, so any positive
    receipts switch the method to Receipts.
    """
    threshold = payment.ape * policy.threshold_multiplier

    if payment.receipts <= threshold:
        return BaseSelection(
            method_used=METHOD_APE,
            commission_base=payment.ape * (policy.product_rate_pct / 100),
        )

    return BaseSelection(
        method_used=METHOD_RECEIPTS,
        commission_base=payment.receipts * (policy.product_rate_pct / 100),
    )


def apply_margin(base: float, margin_pct: float) -> float:
    """Deduct the house margin. Negative margins are computed, not rejected."""
    return base * (1 - margin_pct / 100)


def split_pool(pool: float, split: RoleSplit) -> RoleSplit:
    """Apply each role fraction independently to the pool."""
    return RoleSplit(
        advisor=pool * split.advisor,
        introducer=pool * split.introducer,
        manager=pool * split.manager,
        exec_sales_manager=pool * split.exec_sales_manager,
    )


def compute_commission(payment: Payment, policy: Policy) -> CommissionResult:
    """Full calculation: base → margin → split."""
    selection = compute_base(payment, policy)
    pool_amount = apply_margin(selection.commission_base, policy.margin_pct)

    return CommissionResult(
        method_used=selection.method_used,
        product_rate_pct=policy.product_rate_pct,
        margin_pct=policy.margin_pct,
        commission_base=selection.commission_base,
        pool_amount=pool_amount,
        split=split_pool(pool_amount, policy.split),
    )


def attach_commission(payment: Payment, policy: Policy) -> Payment:
    """Return a copy of the payment carrying its calculated pool amount."""
    result = compute_commission(payment, policy)
    return dataclasses.replace(payment, commission_amount=result.pool_amount)


class CommissionCalculator:
    """Calculates commission results for payments against their policies."""

    def calculate(self, payment: Payment, policy: Policy) -> CommissionResult:
        return compute_commission(payment, policy)

    def price_payments(self, payments: list[Payment], policies: dict[str, Policy]) -> list[Payment]:
        """
        Attach a calculated commission to payments that lack one.

        Only payments whose product has a policy are priced; the rest keep
        no amount and are estimated at rollup time.
        """
        priced = []
        for payment in payments:
            policy = policies.get(payment.product_id)
            if payment.commission_amount is None and policy is not None:
                payment = attach_commission(payment, policy)
            priced.append(payment)
        return priced
