"""
Audit Trail

Builds audit entries from calculator output and defines the repository the
surrounding app stores them in. The engine never owns the storage; callers
inject a repository.
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol

from .models import AuditActor, AuditEntity, AuditEntry, CommissionResult, Payment
from .output import format_currency
from .reports import get_product_name

_WORD_START = re.compile(r"\b\w")


def normalize_action(action: str) -> str:
    """``payment_created`` → ``Payment Created``."""
    return _WORD_START.sub(lambda m: m.group(0).upper(), action.replace("_", " "))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditRepository(Protocol):
    def append(self, entry: AuditEntry) -> AuditEntry: ...

    def by_actor(self, email: str) -> list[AuditEntry]: ...

    def by_entity(self, entity_type: str, entity_id: str) -> list[AuditEntry]: ...


class InMemoryAuditRepository:
    """Process-local audit log, newest entry first. Not thread-safe."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._entries: list[AuditEntry] = []
        self._clock = clock

    def append(self, entry: AuditEntry) -> AuditEntry:
        entry.id = f"audit-{uuid.uuid4().hex[:12]}"
        entry.timestamp = self._clock().isoformat()
        self._entries.insert(0, entry)
        return entry

    def all(self) -> list[AuditEntry]:
        return list(self._entries)

    def by_actor(self, email: str) -> list[AuditEntry]:
        return [entry for entry in self._entries if entry.actor.email == email]

    def by_entity(self, entity_type: str, entity_id: str) -> list[AuditEntry]:
        return [
            entry for entry in self._entries
            if entry.entity.type == entity_type and entry.entity.id == entity_id
        ]


def build_payment_audit_entry(
    payment: Payment, result: CommissionResult, actor: AuditActor
) -> AuditEntry:
    """The "Payment Created" entry recorded when a priced payment is saved."""
    product_name = get_product_name(payment.product_id)
    return AuditEntry(
        actor=actor,
        action="Payment Created",
        entity=AuditEntity(type="payment", id=payment.id, name=f"Payment - {product_name}"),
        details=(
            f"Created commission payment of {format_currency(result.pool_amount)} "
            f"for {product_name}"
        ),
        metadata={
            "methodUsed": result.method_used,
            "commissionBase": result.commission_base,
            "marginPct": result.margin_pct,
            "poolAmount": result.pool_amount,
            "ape": payment.ape,
            "receipts": payment.receipts,
            "productId": payment.product_id,
            "provider": payment.provider,
        },
    )
