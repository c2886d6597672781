"""
Commission Reports

Builds per-payment report rows from calculator output, projects them onto a
user-selected field list for export, and defines the saved-template
repository.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol

from .calculators.commission import compute_commission
from .models import Payment, Policy, ReportFilters, ReportTemplate
from .output import format_currency, format_percentage
from .timeseries import resolve_advisor

PRODUCT_NAMES = {
    "royal-protect": "Term Life (PRD-TERM)",
    "guardian-life": "Critical Illness (PRD-CI)",
    "metlife-secure": "Whole of Life (PRD-WOL)",
    "aviva-protection": "Income Protection (PRD-IP)",
    "zurich-income": "Zurich Income",
}

# id → (label, type)
REPORT_FIELDS = {
    "date": ("Date", "date"),
    "product": ("Product", "text"),
    "provider": ("Provider", "text"),
    "policyId": ("Policy ID", "text"),
    "client": ("Client", "text"),
    "advisor": ("Advisor", "text"),
    "role": ("Role", "text"),
    "ape": ("APE", "currency"),
    "receipts": ("Receipts", "currency"),
    "methodUsed": ("Method Used", "text"),
    "productRatePct": ("Product Rate %", "percentage"),
    "marginPct": ("Margin %", "percentage"),
    "commissionBase": ("Commission Base", "currency"),
    "commissionPool": ("Commission Pool", "currency"),
    "roleShareName": ("Role Share Name", "text"),
    "roleSharePct": ("Role Share %", "percentage"),
    "roleShareAmount": ("Role Share Amount", "currency"),
    "status": ("Status", "text"),
}

DEFAULT_FIELDS = ["date", "product", "ape", "commissionBase", "status"]

# Every row is reported from the advisor's point of view
REPORT_ROLE = "Advisor"


def get_product_name(product_id: str) -> str:
    return PRODUCT_NAMES.get(product_id, product_id)


def _base_row(payment: Payment) -> dict:
    return {
        "id": payment.id,
        "date": payment.date or "",
        "product": get_product_name(payment.product_id) or "Unknown Product",
        "provider": payment.provider or "Unknown",
        "policyId": payment.policy_number or "N/A",
        "client": f"Client {payment.client_id or 'Unknown'}",
        "advisor": f"Advisor {payment.advisor_email or payment.advisor_id or 'Unknown'}",
        "role": REPORT_ROLE,
        "ape": payment.ape,
        "receipts": payment.receipts,
        "status": payment.status,
    }


def _matches(payment: Payment, row: dict, filters: ReportFilters) -> bool:
    if filters.date_from and not (payment.date and payment.date >= filters.date_from):
        return False
    if filters.date_to and not (payment.date and payment.date <= filters.date_to):
        return False
    if filters.products and not (
        row["product"] in filters.products or payment.product_id in filters.products
    ):
        return False
    if filters.providers and row["provider"] not in filters.providers:
        return False
    if filters.roles and row["role"] not in filters.roles:
        return False
    if filters.status and "all" not in filters.status and payment.status not in filters.status:
        return False
    if filters.advisors and resolve_advisor(payment) not in filters.advisors:
        return False
    return True


def build_report_rows(
    payments: list[Payment],
    policies: dict[str, Policy],
    filters: ReportFilters | None = None,
) -> list[dict]:
    """
    One row per payment that passes the filters, in input order.

    Payments whose product has a policy also carry the calculator output:
    method, base, pool, the policy percentages, each role's share and the
    advisor's own share. Date bounds compare the full ISO date string.
    """
    filters = filters or ReportFilters()

    rows = []
    for payment in payments:
        row = _base_row(payment)
        if not _matches(payment, row, filters):
            continue

        policy = policies.get(payment.product_id)
        if policy is not None:
            result = compute_commission(payment, policy)
            row.update({
                "methodUsed": result.method_used,
                "commissionBase": result.commission_base,
                "commissionPool": result.pool_amount,
                "productRatePct": result.product_rate_pct,
                "marginPct": result.margin_pct,
                "roleShareName": REPORT_ROLE,
                "roleSharePct": policy.split.advisor * 100,
                "roleShareAmount": result.split.advisor,
                **result.split.to_dict(),
            })
        rows.append(row)

    return rows


def _format_cell(field_id: str, value):
    if value is None:
        return ""
    field_type = REPORT_FIELDS.get(field_id, (field_id, "text"))[1]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if field_type == "currency":
            return format_currency(value)
        if field_type == "percentage":
            return format_percentage(value)
    return value


def select_fields(rows: list[dict], fields: list[str]) -> list[dict]:
    """
    Project rows onto ``fields`` for export.

    Keys become the field labels in the requested order; currency and
    percentage values are formatted for display.
    """
    projected = []
    for row in rows:
        projected.append({
            REPORT_FIELDS.get(field_id, (field_id, "text"))[0]: _format_cell(field_id, row.get(field_id))
            for field_id in fields
        })
    return projected


# =============================================================================
# SAVED TEMPLATES
# =============================================================================


class ReportTemplateRepository(Protocol):
    def add(self, template: ReportTemplate) -> ReportTemplate: ...

    def remove(self, template_id: str) -> None: ...

    def get(self, template_id: str) -> ReportTemplate | None: ...

    def all(self) -> list[ReportTemplate]: ...


class InMemoryReportTemplateRepository:
    """Process-local template store in insertion order. Not thread-safe."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._templates: list[ReportTemplate] = []
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def add(self, template: ReportTemplate) -> ReportTemplate:
        if not template.name.strip():
            raise ValueError("Template name is required")
        template.id = uuid.uuid4().hex[:9]
        template.created_at = self._clock().isoformat()
        self._templates.append(template)
        return template

    def remove(self, template_id: str) -> None:
        self._templates = [t for t in self._templates if t.id != template_id]

    def get(self, template_id: str) -> ReportTemplate | None:
        return next((t for t in self._templates if t.id == template_id), None)

    def all(self) -> list[ReportTemplate]:
        return list(self._templates)
