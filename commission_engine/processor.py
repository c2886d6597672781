"""
Commission Processor - Main Orchestrator

Entry point for the service surfaces. Normalizes raw request payloads, runs
the calculator and rollup, and converts results back to their external
shape.
"""

from datetime import date
from typing import Any, Callable, Dict

from .audit import AuditRepository, build_payment_audit_entry
from .calculators import CommissionCalculator, attach_commission
from .models import AuditActor, CommissionResult, Payment, Policy, ReportFilters, RollupOptions
from .normalization import index_policies, normalize_payment, normalize_payments, normalize_policy
from .output import can_export_csv, to_csv
from .reports import DEFAULT_FIELDS, build_report_rows, select_fields
from .timeseries import fill_month_gaps, get_date_range, months_between, rollup_monthly
from .validators import PaymentValidator


class CommissionProcessor:
    """
    Coordinates the engine for previews, payment creation and reports.

    Preview / create:
    1. Normalize payment and policy
    2. Validate the payment (entry-form rules)
    3. Calculate commission
    4. (create only) Attach the commission and record an audit entry

    Monthly report:
    1. Normalize payments, dropping unusable records
    2. Price payments whose policy is supplied
    3. Roll up by month within the requested window
    4. Gap-fill when a period or month list is requested
    """

    def __init__(
        self,
        audit_repository: AuditRepository | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.validator = PaymentValidator()
        self.calculator = CommissionCalculator()
        self.audit_repository = audit_repository
        self._today = today

    def preview(self, payment: Payment, policy: Policy) -> CommissionResult:
        self.validator.validate(payment, policy)
        return self.calculator.calculate(payment, policy)

    def create_payment(self, payment: Payment, policy: Policy, actor: AuditActor) -> Dict[str, Any]:
        """Price a new payment and, when a repository is configured, audit it."""
        result = self.preview(payment, policy)
        priced = attach_commission(payment, policy)

        output = {"payment": priced.to_dict(), "commission": result.to_dict()}
        if self.audit_repository is not None:
            entry = self.audit_repository.append(build_payment_audit_entry(priced, result, actor))
            output["auditEntry"] = entry.to_dict()
        return output

    def preview_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payment, policy = self._payment_and_policy(data)
        return self.preview(payment, policy).to_dict()

    def create_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payment, policy = self._payment_and_policy(data)
        return self.create_payment(payment, policy, AuditActor.from_dict(data.get("actor")))

    def rollup_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Monthly series from raw payments.

        Recognized keys: payments, policies, period, from, to, advisorFilter,
        months. Explicit from/to override the period window.
        """
        payments = normalize_payments(self._list(data, "payments"))
        policies = index_policies(self._list(data, "policies"))
        payments = self.calculator.price_payments(payments, policies)

        options = RollupOptions.from_dict(data)
        months = self._list(data, "months")

        period = data.get("period")
        if period:
            window = get_date_range(period, self._today())
            options.from_month = options.from_month or window["from"]
            options.to_month = options.to_month or window["to"]
            if not months:
                months = months_between(options.from_month, options.to_month)

        series = rollup_monthly(payments, options)
        if months:
            series = fill_month_gaps(series, months)

        return {"series": [item.to_dict() for item in series]}

    def report_rows_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payments = normalize_payments(self._list(data, "payments"))
        policies = index_policies(self._list(data, "policies"))
        filters = ReportFilters.from_dict(data.get("filters"))
        return {"rows": build_report_rows(payments, policies, filters)}

    def export_csv_from_dict(self, data: Dict[str, Any]) -> str:
        """
        CSV text for either the monthly series or the report rows.

        ``report`` selects ``monthly`` or ``rows`` (default). Raises
        PermissionError when the caller's role may not export.
        """
        role = data.get("role")
        if not can_export_csv(role):
            raise PermissionError(f"CSV export is not available for role: {role or 'guest'}")

        report = data.get("report", "rows")
        if report == "monthly":
            return to_csv(self.rollup_from_dict(data)["series"])
        if report == "rows":
            rows = self.report_rows_from_dict(data)["rows"]
            fields = self._list(data, "fields") or DEFAULT_FIELDS
            return to_csv(select_fields(rows, fields))

        raise ValueError(f"Invalid report: {report}. Must be 'monthly' or 'rows'")

    def _payment_and_policy(self, data: Dict[str, Any]) -> tuple[Payment, Policy]:
        raw_payment = data.get("payment")
        raw_policy = data.get("policy")
        if not isinstance(raw_payment, dict):
            raise ValueError("payment is required")
        if not isinstance(raw_policy, dict):
            raise ValueError("policy is required")
        return normalize_payment(raw_payment), normalize_policy(raw_policy)

    @staticmethod
    def _list(data: Dict[str, Any], key: str) -> list:
        value = data.get(key) or []
        if not isinstance(value, list):
            raise ValueError(f"{key} must be a list")
        return value


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def preview_commission_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """Preview a payment's commission from a Python dict."""
    return CommissionProcessor().preview_from_dict(input_data)


def monthly_report_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """Monthly series from a Python dict."""
    return CommissionProcessor().rollup_from_dict(input_data)
