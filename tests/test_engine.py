"""
Tests for the Commission Processor

Run with: python -m pytest tests/ -v
"""

import pytest
from datetime import date
from commission_engine import CommissionProcessor
from commission_engine.audit import InMemoryAuditRepository
from commission_engine.processor import monthly_report_from_dict, preview_commission_from_dict


POLICY = {
    "productId": "royal-protect",
    "productRatePct": 20,
    "marginPct": 10,
    "thresholdMultiplier": 0.6,
    "split": {"Advisor": 0.5, "Introducer": 0.1, "Manager": 0.2, "ExecSalesManager": 0.2},
}


class TestPreview:
    """Test single-payment preview."""

    @pytest.fixture
    def processor(self):
        return CommissionProcessor()

    @pytest.fixture
    def sample_input(self):
        return {
            "payment": {
                "id": "P-1",
                "productId": "royal-protect",
                "provider": "Royal London",
                "date": "2025-09-12",
                "ape": 10000,
                "receipts": 5000,
                "status": "Pending",
            },
            "policy": POLICY,
        }

    def test_basic_preview(self, processor, sample_input):
        result = processor.preview_from_dict(sample_input)

        assert result["methodUsed"] == "APE"
        assert result["commissionBase"] == pytest.approx(2000)
        assert result["poolAmount"] == pytest.approx(1800)
        assert result["split"]["Advisor"] == pytest.approx(900)

    def test_receipts_method(self, processor, sample_input):
        sample_input["payment"]["receipts"] = 8000
        result = processor.preview_from_dict(sample_input)

        assert result["methodUsed"] == "Receipts"
        assert result["poolAmount"] == pytest.approx(1440)

    def test_legacy_receipts_field(self, processor, sample_input):
        del sample_input["payment"]["receipts"]
        sample_input["payment"]["actualReceipts"] = 8000

        assert processor.preview_from_dict(sample_input)["methodUsed"] == "Receipts"

    def test_negative_ape_fails_validation(self, processor, sample_input):
        sample_input["payment"]["ape"] = -1

        with pytest.raises(ValueError, match="ape cannot be negative"):
            processor.preview_from_dict(sample_input)

    def test_missing_policy(self, processor, sample_input):
        del sample_input["policy"]

        with pytest.raises(ValueError, match="policy is required"):
            processor.preview_from_dict(sample_input)

    def test_convenience_function(self, sample_input):
        assert preview_commission_from_dict(sample_input)["poolAmount"] == pytest.approx(1800)


class TestCreatePayment:
    """Test payment creation with audit recording."""

    def test_attaches_commission_and_records_audit(self):
        repository = InMemoryAuditRepository()
        processor = CommissionProcessor(audit_repository=repository)

        result = processor.create_from_dict({
            "payment": {"id": "P-1", "productId": "royal-protect", "provider": "Royal London",
                        "date": "2025-09-12", "ape": 10000, "receipts": 5000},
            "policy": POLICY,
            "actor": {"id": "u1", "name": "Sam", "email": "sam@firm.com", "role": "advisor"},
        })

        assert result["payment"]["commissionAmount"] == pytest.approx(1800)
        assert result["commission"]["methodUsed"] == "APE"
        assert result["auditEntry"]["action"] == "Payment Created"
        assert len(repository.by_actor("sam@firm.com")) == 1
        assert len(repository.by_entity("payment", "P-1")) == 1

    def test_without_repository_no_audit_entry(self):
        result = CommissionProcessor().create_from_dict({
            "payment": {"productId": "royal-protect", "provider": "x", "ape": 100},
            "policy": POLICY,
        })

        assert "auditEntry" not in result


class TestMonthlyReport:
    """Test rollup requests."""

    @pytest.fixture
    def processor(self):
        return CommissionProcessor(today=lambda: date(2025, 9, 15))

    @pytest.fixture
    def payments(self):
        return [
            {"id": "P-1", "productId": "royal-protect", "date": "2025-09-01", "ape": 10000,
             "receipts": 5000, "commissionAmount": 1800, "advisorEmail": "sam@firm.com"},
            {"id": "P-2", "productId": "unknown", "paymentDate": "2025-07-03", "ape": 10000,
             "actualReceipts": 2000, "advisorId": 7},
            {"id": "P-3", "productId": "unknown", "date": "bad-date", "ape": 999},
            {"id": "P-4", "productId": "unknown", "date": "2025-07-20", "ape": "oops"},
        ]

    def test_sparse_series_without_window(self, processor, payments):
        series = processor.rollup_from_dict({"payments": payments})["series"]

        assert [item["month"] for item in series] == ["2025-07", "2025-09"]
        assert series[0]["totalCommission"] == pytest.approx(300)
        assert series[0]["totalReceipts"] == pytest.approx(2000)
        assert series[1]["totalCommission"] == pytest.approx(1800)

    def test_period_is_gap_filled(self, processor, payments):
        series = processor.rollup_from_dict({"payments": payments, "period": "last6Months"})["series"]

        assert [item["month"] for item in series] == [
            "2025-04", "2025-05", "2025-06", "2025-07", "2025-08", "2025-09"
        ]
        assert [item["count"] for item in series] == [0, 0, 0, 1, 0, 1]

    def test_explicit_months_order_is_kept(self, processor, payments):
        series = processor.rollup_from_dict({"payments": payments, "months": ["2025-09", "2025-08"]})["series"]

        assert [item["month"] for item in series] == ["2025-09", "2025-08"]

    def test_advisor_filter(self, processor, payments):
        data = {"payments": payments, "advisorFilter": ["advisor7@advisor.com"]}
        series = processor.rollup_from_dict(data)["series"]

        assert [item["month"] for item in series] == ["2025-07"]

    def test_supplied_policies_price_payments(self, processor, payments):
        payments[1]["productId"] = "royal-protect"
        data = {"payments": payments, "policies": [POLICY], "from": "2025-07", "to": "2025-07"}
        series = processor.rollup_from_dict(data)["series"]

        # 2000 receipts <= 6000 threshold → APE base 2000, pool 1800
        assert series[0]["totalCommission"] == pytest.approx(1800)

    def test_payments_must_be_a_list(self, processor):
        with pytest.raises(ValueError):
            processor.rollup_from_dict({"payments": "nope"})

    def test_convenience_function(self, payments):
        series = monthly_report_from_dict({"payments": payments})["series"]

        assert sum(item["count"] for item in series) == 2


class TestExport:
    """Test CSV export requests."""

    @pytest.fixture
    def processor(self):
        return CommissionProcessor(today=lambda: date(2025, 9, 15))

    @pytest.fixture
    def payments(self):
        return [{"id": "P-1", "productId": "royal-protect", "provider": "Royal London",
                 "date": "2025-09-01", "ape": 10000, "receipts": 5000, "status": "Paid"}]

    def test_refused_role(self, processor, payments):
        with pytest.raises(PermissionError):
            processor.export_csv_from_dict({"role": "client", "payments": payments})

    def test_rows_export_uses_selected_fields(self, processor, payments):
        csv_text = processor.export_csv_from_dict({
            "role": "Advisor",
            "payments": payments,
            "policies": [POLICY],
            "fields": ["date", "methodUsed", "commissionPool"],
        })

        assert csv_text.split("\n") == [
            "Date,Method Used,Commission Pool",
            '2025-09-01,APE,"£1,800.00"',
        ]

    def test_rows_export_default_fields(self, processor, payments):
        header = processor.export_csv_from_dict({"role": "admin", "payments": payments}).split("\n")[0]

        assert header == "Date,Product,APE,Commission Base,Status"

    def test_monthly_export(self, processor, payments):
        csv_text = processor.export_csv_from_dict({
            "role": "manager",
            "report": "monthly",
            "payments": payments,
            "period": "thisMonth",
        })

        lines = csv_text.split("\n")
        assert lines[0] == "month,totalCommission,count,totalApe,totalReceipts"
        # No policy attached: 3% of 10000 APE
        assert lines[1] == "2025-09,300,1,10000,5000"

    def test_unknown_report(self, processor, payments):
        with pytest.raises(ValueError, match="Invalid report"):
            processor.export_csv_from_dict({"role": "admin", "report": "pie", "payments": payments})
