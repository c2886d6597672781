"""
Input Validation for Payment Entry

The checks the payment-entry form applies before a payment is previewed or
created. The calculator itself never validates; these run at the service
boundary only. Raises ValueError with clear messages for any violation.
"""

from .models import PAYMENT_STATUSES, Payment, Policy


class PaymentValidator:
    """Validates a draft payment according to the entry-form rules."""

    def validate(self, payment: Payment, policy: Policy | None = None) -> None:
        """
        Run all validations. Raises ValueError if any check fails.
        """
        self._validate_required(payment)
        self._validate_amounts(payment)
        self._validate_status(payment)
        if policy is not None:
            self._validate_policy_match(payment, policy)

    def _validate_required(self, payment: Payment) -> None:
        if not payment.product_id or not payment.provider:
            raise ValueError("productId and provider are required")

        if not payment.ape and not payment.receipts:
            raise ValueError("At least one of ape or receipts must be provided")

    def _validate_amounts(self, payment: Payment) -> None:
        if payment.ape < 0:
            raise ValueError(f"ape cannot be negative, got: {payment.ape}")

        if payment.receipts < 0:
            raise ValueError(f"receipts cannot be negative, got: {payment.receipts}")

    def _validate_status(self, payment: Payment) -> None:
        if payment.status not in PAYMENT_STATUSES:
            raise ValueError(
                f"Invalid status: {payment.status}. Must be one of {', '.join(PAYMENT_STATUSES)}"
            )

    def _validate_policy_match(self, payment: Payment, policy: Policy) -> None:
        if policy.product_id and policy.product_id != payment.product_id:
            raise ValueError(
                f"Policy is for product {policy.product_id}, payment is for {payment.product_id}"
            )
