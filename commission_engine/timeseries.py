"""
Time-Series Rollup

Aggregates payments into one record per calendar month for dashboards and
reports, plus the month-window helpers the reporting screens use.

Month keys are ``YYYY-MM`` strings; they sort lexicographically in
chronological order, so plain string comparison is used for ranges.
"""

import logging
import re
from datetime import date, datetime

from .calculators.strategies import select_strategy
from .models import Payment, RollupOptions, TimeSeriesData

logger = logging.getLogger(__name__)

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})")

PERIODS = ("thisMonth", "last3Months", "last6Months", "ytd")


# =============================================================================
# MONTH HELPERS
# =============================================================================


def month_key(value) -> str | None:
    """Return the ``YYYY-MM`` prefix of an ISO date string, or None if unusable."""
    if not isinstance(value, str):
        return None
    match = _MONTH_PATTERN.match(value)
    if not match or not 1 <= int(match.group(2)) <= 12:
        return None
    return match.group(0)


def _format_month(index: int) -> str:
    year, month = divmod(index, 12)
    return f"{year:04d}-{month + 1:02d}"


def current_month(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def months_back(n: int, today: date | None = None) -> list[str]:
    """
    The ``n`` most recent months ending at the current month, oldest first.

    >>> months_back(3, date(2025, 2, 10))
    ['2024-12', '2025-01', '2025-02']
    """
    today = today or date.today()
    index = today.year * 12 + today.month - 1
    return [_format_month(index - offset) for offset in range(n - 1, -1, -1)]


def get_date_range(period: str, today: date | None = None) -> dict:
    """Map a named period to an inclusive ``{"from", "to"}`` month window."""
    today = today or date.today()
    this_month = current_month(today)

    if period == "thisMonth":
        return {"from": this_month, "to": this_month}
    if period == "last3Months":
        return {"from": months_back(3, today)[0], "to": this_month}
    if period == "ytd":
        return {"from": f"{today.year:04d}-01", "to": this_month}

    # last6Months and anything unrecognised
    return {"from": months_back(6, today)[0], "to": this_month}


def months_between(from_month: str, to_month: str) -> list[str]:
    """Every month from ``from_month`` to ``to_month`` inclusive."""
    start = datetime.strptime(from_month, "%Y-%m")
    end = datetime.strptime(to_month, "%Y-%m")
    first = start.year * 12 + start.month - 1
    last = end.year * 12 + end.month - 1
    return [_format_month(index) for index in range(first, last + 1)]


def format_month_for_display(month: str) -> str:
    """``2025-09`` → ``Sep 2025``."""
    return datetime.strptime(month, "%Y-%m").strftime("%b %Y")


# =============================================================================
# ROLLUP
# =============================================================================


def resolve_advisor(payment: Payment) -> str | None:
    """
    Advisor identity used for filtering.

    Sources that only carry a numeric advisor id get the synthesized
    ``advisor{id}@advisor.com`` address.
    """
    if payment.advisor_email:
        return payment.advisor_email
    if payment.advisor_id is not None:
        return f"advisor{payment.advisor_id}@advisor.com"
    return None


def _in_window(month: str, options: RollupOptions) -> bool:
    if options.from_month and month < options.from_month:
        return False
    if options.to_month and month > options.to_month:
        return False
    return True


def rollup_monthly(
    payments: list[Payment], options: RollupOptions | None = None
) -> list[TimeSeriesData]:
    """
    Aggregate payments into monthly totals.

    Steps:
    1. Drop payments without a usable date, outside the window, or not
       belonging to a filtered advisor
    2. Group by month
    3. Sum APE, receipts and commission (attached amount or 3% estimate)
    4. Sort ascending by month
    """
    options = options or RollupOptions()
    advisors = set(options.advisor_filter)

    groups: dict[str, list[Payment]] = {}
    skipped = 0

    for payment in payments:
        month = month_key(payment.date)
        if month is None:
            skipped += 1
            continue
        if not _in_window(month, options):
            continue
        if advisors and resolve_advisor(payment) not in advisors:
            continue
        groups.setdefault(month, []).append(payment)

    if skipped:
        logger.debug("Skipped %d payments without a usable date", skipped)

    rollups = []
    for month, month_payments in groups.items():
        bucket = TimeSeriesData(month=month, count=len(month_payments))
        for payment in month_payments:
            bucket.total_commission += select_strategy(payment).amount(payment)
            bucket.total_ape += payment.ape
            bucket.total_receipts += payment.receipts
        rollups.append(bucket)

    rollups.sort(key=lambda item: item.month)
    return rollups


def fill_month_gaps(data: list[TimeSeriesData], months: list[str]) -> list[TimeSeriesData]:
    """Dense series in the order of ``months``; missing months are all zero."""
    by_month = {item.month: item for item in data}
    return [by_month.get(month) or TimeSeriesData.empty(month) for month in months]
