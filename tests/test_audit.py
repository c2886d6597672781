"""Tests for the audit trail helpers and in-memory repository."""

import pytest
from datetime import datetime, timezone
from commission_engine.audit import (
    InMemoryAuditRepository,
    build_payment_audit_entry,
    normalize_action,
)
from commission_engine.calculators import compute_commission
from commission_engine.models import AuditActor, AuditEntity, AuditEntry, Payment, Policy, RoleSplit

FIXED_NOW = datetime(2025, 9, 15, 12, 0, tzinfo=timezone.utc)


def make_entry(email="sam@firm.com", entity_type="payment", entity_id="P-1") -> AuditEntry:
    return AuditEntry(
        actor=AuditActor(id="u1", name="Sam", email=email, role="advisor"),
        action="Payment Created",
        entity=AuditEntity(type=entity_type, id=entity_id),
    )


class TestNormalizeAction:

    @pytest.mark.parametrize("action,expected", [
        ("payment_created", "Payment Created"),
        ("export_csv_report", "Export Csv Report"),
        ("login", "Login"),
        ("Already Title", "Already Title"),
    ])
    def test_snake_case_to_title_words(self, action, expected):
        assert normalize_action(action) == expected


class TestInMemoryAuditRepository:

    @pytest.fixture
    def repository(self):
        return InMemoryAuditRepository(clock=lambda: FIXED_NOW)

    def test_append_stamps_id_and_timestamp(self, repository):
        entry = repository.append(make_entry())

        assert entry.id.startswith("audit-")
        assert entry.timestamp == "2025-09-15T12:00:00+00:00"

    def test_newest_first(self, repository):
        first = repository.append(make_entry(entity_id="P-1"))
        second = repository.append(make_entry(entity_id="P-2"))

        assert repository.all() == [second, first]
        assert first.id != second.id

    def test_query_by_actor(self, repository):
        repository.append(make_entry(email="sam@firm.com"))
        repository.append(make_entry(email="alex@firm.com"))

        assert [e.actor.email for e in repository.by_actor("alex@firm.com")] == ["alex@firm.com"]

    def test_query_by_entity(self, repository):
        repository.append(make_entry(entity_type="payment", entity_id="P-1"))
        repository.append(make_entry(entity_type="policy", entity_id="P-1"))
        repository.append(make_entry(entity_type="payment", entity_id="P-2"))

        found = repository.by_entity("payment", "P-1")
        assert len(found) == 1
        assert found[0].entity.type == "payment"


class TestPaymentAuditEntry:

    def test_entry_describes_priced_payment(self):
        payment = Payment(id="P-1", product_id="royal-protect", provider="Royal London",
                          date="2025-09-01", ape=10000, receipts=5000)
        policy = Policy(product_id="royal-protect", product_rate_pct=20, margin_pct=10,
                        threshold_multiplier=0.6, split=RoleSplit(advisor=1.0))
        result = compute_commission(payment, policy)
        actor = AuditActor(id="u1", name="Sam", email="sam@firm.com", role="advisor")

        entry = build_payment_audit_entry(payment, result, actor)

        assert entry.action == "Payment Created"
        assert entry.entity == AuditEntity(type="payment", id="P-1", name="Payment - Term Life (PRD-TERM)")
        assert entry.details == "Created commission payment of £1,800.00 for Term Life (PRD-TERM)"
        assert entry.metadata["methodUsed"] == "APE"
        assert entry.metadata["poolAmount"] == pytest.approx(1800)
        assert entry.metadata["provider"] == "Royal London"
        assert entry.to_dict()["actor"]["email"] == "sam@firm.com"
