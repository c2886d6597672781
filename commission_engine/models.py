"""
Domain Models for the Commission Engine

These dataclasses provide type-safe representations of all business entities.
Monetary values are plain floats: results must match the payments service
bit for bit, so no rounding or Decimal conversion happens here.
"""

from dataclasses import dataclass, field
from datetime import date as date_type

# =============================================================================
# CONSTANTS
# =============================================================================

METHOD_APE = "APE"
METHOD_RECEIPTS = "Receipts"

PAYMENT_STATUSES = ("Paid", "Pending", "Processing")

# External (camelCase) key for each role in a split
ROLE_KEYS = {
    "advisor": "Advisor",
    "introducer": "Introducer",
    "manager": "Manager",
    "exec_sales_manager": "ExecSalesManager",
}


def _optional_float(value) -> float | None:
    return float(value) if value is not None else None


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass(frozen=True)
class RoleSplit:
    """Four-way split across Advisor / Introducer / Manager / ExecSalesManager.

    On a Policy the values are fractions of the pool; on a CommissionResult
    they are monetary shares.
    """

    advisor: float = 0.0
    introducer: float = 0.0
    manager: float = 0.0
    exec_sales_manager: float = 0.0

    @property
    def total(self) -> float:
        return self.advisor + self.introducer + self.manager + self.exec_sales_manager

    @classmethod
    def from_dict(cls, data: dict | None) -> "RoleSplit":
        data = data or {}
        return cls(**{attr: float(data.get(key, 0) or 0) for attr, key in ROLE_KEYS.items()})

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for attr, key in ROLE_KEYS.items()}


@dataclass(frozen=True)
class Policy:
    """Commission rules for one product. Immutable once loaded."""

    product_id: str
    product_rate_pct: float
    margin_pct: float
    threshold_multiplier: float
    split: RoleSplit = field(default_factory=RoleSplit)

    @classmethod
    def from_dict(cls, data: dict) -> "Policy":
        return cls(
            product_id=str(data.get("productId", "")),
            product_rate_pct=float(data.get("productRatePct", 0) or 0),
            margin_pct=float(data.get("marginPct", 0) or 0),
            threshold_multiplier=float(data.get("thresholdMultiplier", 0) or 0),
            split=RoleSplit.from_dict(data.get("split")),
        )

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productRatePct": self.product_rate_pct,
            "marginPct": self.margin_pct,
            "thresholdMultiplier": self.threshold_multiplier,
            "split": self.split.to_dict(),
        }


@dataclass(frozen=True)
class Payment:
    """A single commission payment in canonical shape.

    Field-name variants from older payment sources are resolved by
    ``normalization.normalize_payment`` before a Payment is built.
    """

    id: str = ""
    product_id: str = ""
    provider: str = ""
    date: str | None = None
    ape: float = 0.0
    receipts: float = 0.0
    status: str = "Pending"
    advisor_email: str | None = None
    advisor_id: str | None = None
    policy_number: str | None = None
    client_id: str | None = None
    notes: str | None = None
    # Commission already priced and attached by the payments service
    commission_amount: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        raw_date = data.get("date")
        if isinstance(raw_date, date_type):
            raw_date = raw_date.isoformat()
        elif not isinstance(raw_date, str):
            # Numbers, lists etc. carry no usable date
            raw_date = None
        advisor_id = data.get("advisorId")
        return cls(
            id=str(data.get("id", "") or ""),
            product_id=str(data.get("productId", "") or ""),
            provider=str(data.get("provider", "") or ""),
            date=raw_date,
            ape=float(data.get("ape") or 0),
            receipts=float(data.get("receipts") or 0),
            status=data.get("status") or "Pending",
            advisor_email=data.get("advisorEmail") or None,
            advisor_id=str(advisor_id) if advisor_id not in (None, "") else None,
            policy_number=data.get("policyNumber"),
            client_id=data.get("clientId"),
            notes=data.get("notes"),
            commission_amount=_optional_float(data.get("commissionAmount")),
        )

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "productId": self.product_id,
            "provider": self.provider,
            "date": self.date,
            "ape": self.ape,
            "receipts": self.receipts,
            "status": self.status,
        }
        optional = {
            "advisorEmail": self.advisor_email,
            "advisorId": self.advisor_id,
            "policyNumber": self.policy_number,
            "clientId": self.client_id,
            "notes": self.notes,
            "commissionAmount": self.commission_amount,
        }
        result.update({key: value for key, value in optional.items() if value is not None})
        return result


@dataclass
class RollupOptions:
    """Month window (inclusive, ``YYYY-MM``) and advisor filter for a rollup."""

    from_month: str | None = None
    to_month: str | None = None
    advisor_filter: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RollupOptions":
        return cls(
            from_month=data.get("from") or None,
            to_month=data.get("to") or None,
            advisor_filter=list(data.get("advisorFilter") or []),
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass(frozen=True)
class BaseSelection:
    """Result of choosing between APE and Receipts as the commission base."""

    method_used: str
    commission_base: float


@dataclass(frozen=True)
class CommissionResult:
    """Commission split for one payment under one policy."""

    method_used: str
    product_rate_pct: float
    margin_pct: float
    commission_base: float
    pool_amount: float
    split: RoleSplit

    def to_dict(self) -> dict:
        return {
            "methodUsed": self.method_used,
            "productRatePct": self.product_rate_pct,
            "marginPct": self.margin_pct,
            "commissionBase": self.commission_base,
            "poolAmount": self.pool_amount,
            "split": self.split.to_dict(),
        }


@dataclass
class TimeSeriesData:
    """Aggregated totals for one calendar month."""

    month: str
    total_commission: float = 0.0
    count: int = 0
    total_ape: float = 0.0
    total_receipts: float = 0.0

    @classmethod
    def empty(cls, month: str) -> "TimeSeriesData":
        return cls(month=month)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "totalCommission": self.total_commission,
            "count": self.count,
            "totalApe": self.total_ape,
            "totalReceipts": self.total_receipts,
        }


# =============================================================================
# AUDIT / REPORTING MODELS
# =============================================================================


@dataclass(frozen=True)
class AuditActor:
    id: str = ""
    name: str = ""
    email: str = ""
    role: str = ""

    @classmethod
    def from_dict(cls, data: dict | None) -> "AuditActor":
        data = data or {}
        return cls(
            id=str(data.get("id", "") or ""),
            name=data.get("name", "") or "",
            email=data.get("email", "") or "",
            role=data.get("role", "") or "",
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}


@dataclass(frozen=True)
class AuditEntity:
    type: str
    id: str
    name: str = ""

    def to_dict(self) -> dict:
        return {"type": self.type, "id": self.id, "name": self.name}


@dataclass
class AuditEntry:
    """One audit-trail record. ``id`` and ``timestamp`` are stamped on append."""

    actor: AuditActor
    action: str
    entity: AuditEntity
    details: str = ""
    metadata: dict = field(default_factory=dict)
    id: str = ""
    timestamp: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "actor": self.actor.to_dict(),
            "action": self.action,
            "entity": self.entity.to_dict(),
            "details": self.details,
            "metadata": self.metadata,
        }


@dataclass
class ReportFilters:
    """Row filters for a commission report. Empty lists mean "no filter"."""

    date_from: str | None = None
    date_to: str | None = None
    products: list[str] = field(default_factory=list)
    providers: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)
    status: list[str] = field(default_factory=list)
    advisors: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict | None) -> "ReportFilters":
        data = data or {}
        date_range = data.get("dateRange") or {}
        return cls(
            date_from=date_range.get("from") or None,
            date_to=date_range.get("to") or None,
            products=list(data.get("products") or []),
            providers=list(data.get("providers") or []),
            roles=list(data.get("roles") or []),
            status=list(data.get("status") or []),
            advisors=list(data.get("advisors") or []),
        )

    def to_dict(self) -> dict:
        return {
            "dateRange": {"from": self.date_from or "", "to": self.date_to or ""},
            "products": list(self.products),
            "providers": list(self.providers),
            "roles": list(self.roles),
            "status": list(self.status),
            "advisors": list(self.advisors),
        }


@dataclass
class ReportTemplate:
    """A saved report layout. ``id`` and ``created_at`` are stamped on add."""

    name: str
    selected_fields: list[str]
    filters: ReportFilters = field(default_factory=ReportFilters)
    created_by: str = ""
    id: str = ""
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "selectedFields": list(self.selected_fields),
            "filters": self.filters.to_dict(),
            "createdAt": self.created_at,
            "createdBy": self.created_by,
        }
