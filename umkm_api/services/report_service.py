"""Sales report service module.

Aggregates the transaction ledger over a date range into a summary and a
series of calendar buckets (day, Monday-start week, month or year).

Counting rules:
- A transaction is visible only through its line items. A header with no
  items never appears in a report, although it is still in the ledger.
- Revenue comes from each transaction's ``total_amount`` and is counted
  once per transaction, not once per line.
- All money is summed as ``Decimal``.
"""
import calendar
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from umkm_api.exceptions.api_exception import ValidationFailedError
from umkm_api.models.sales_transaction import SalesTransaction, SalesTransactionItem
from umkm_api.schemas.product import quantize_money
from umkm_api.schemas.report import (
    ReportPeriod,
    SalesReportItem,
    SalesReportResponse,
    SalesReportSummary,
)

DATE_FORMAT = "%Y-%m-%d"


def _parse_date(value: Union[date, str]) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise ValidationFailedError(f"Date must be in YYYY-MM-DD format: {value!r}") from exc


def resolve_end_date(period: ReportPeriod, start_date: date) -> date:
    """Last day covered by ``period`` when it starts on ``start_date``."""
    if period == ReportPeriod.DAILY:
        return start_date
    if period == ReportPeriod.WEEKLY:
        return start_date + timedelta(days=6)
    if period == ReportPeriod.MONTHLY:
        last_day = calendar.monthrange(start_date.year, start_date.month)[1]
        return start_date.replace(day=last_day)
    if period == ReportPeriod.YEARLY:
        return date(start_date.year, 12, 31)
    raise ValidationFailedError(f"Unknown report period: {period}")


def bucket_start(period: ReportPeriod, day: date) -> date:
    """Truncate ``day`` to the first day of its bucket."""
    if period == ReportPeriod.DAILY:
        return day
    if period == ReportPeriod.WEEKLY:
        return day - timedelta(days=day.weekday())
    if period == ReportPeriod.MONTHLY:
        return day.replace(day=1)
    if period == ReportPeriod.YEARLY:
        return day.replace(month=1, day=1)
    raise ValidationFailedError(f"Unknown report period: {period}")


class _Bucket:
    """Running totals for one bucket."""

    __slots__ = ("transactions", "revenue", "items_sold")

    def __init__(self):
        self.transactions = 0
        self.revenue = Decimal("0")
        self.items_sold = 0

    def add(self, total_amount: Decimal, items_sold: int) -> None:
        self.transactions += 1
        self.revenue += total_amount
        self.items_sold += items_sold


async def _fetch_transaction_totals(
    db: AsyncSession,
    range_start: datetime,
    range_end: datetime,
):
    """One row per qualifying transaction: date, total_amount, items sold.

    The inner join on line items drops headers without items.
    """
    query = (
        select(
            SalesTransaction.id,
            SalesTransaction.transaction_date,
            SalesTransaction.total_amount,
            func.sum(SalesTransactionItem.quantity).label("items_sold"),
        )
        .join(SalesTransactionItem, SalesTransactionItem.transaction_id == SalesTransaction.id)
        .where(
            SalesTransaction.transaction_date >= range_start,
            SalesTransaction.transaction_date < range_end,
        )
        .group_by(
            SalesTransaction.id,
            SalesTransaction.transaction_date,
            SalesTransaction.total_amount,
        )
        .order_by(SalesTransaction.transaction_date, SalesTransaction.id)
    )
    result = await db.execute(query)
    return result.all()


async def build_report(
    db: AsyncSession,
    period: Union[ReportPeriod, str],
    start_date: Union[date, str],
    end_date: Optional[Union[date, str]] = None,
) -> SalesReportResponse:
    """
    Build a sales report for ``[start_date, end_date]``, both days inclusive.

    When ``end_date`` is omitted it is derived from ``period``: the same day,
    six days later, the end of the month or the end of the year.

    Raises:
        ValidationFailedError: bad period, bad date, or end before start
    """
    try:
        period = ReportPeriod(period)
    except ValueError as exc:
        raise ValidationFailedError(f"Unknown report period: {period}") from exc

    start = _parse_date(start_date)
    end = _parse_date(end_date) if end_date is not None else resolve_end_date(period, start)
    if end < start:
        raise ValidationFailedError(
            f"end_date {end.strftime(DATE_FORMAT)} is before start_date {start.strftime(DATE_FORMAT)}"
        )

    range_start = datetime.combine(start, time.min)
    range_end = datetime.combine(end + timedelta(days=1), time.min)
    rows = await _fetch_transaction_totals(db, range_start, range_end)

    summary = _Bucket()
    buckets: dict[date, _Bucket] = {}
    for row in rows:
        total_amount = Decimal(row.total_amount)
        items_sold = int(row.items_sold or 0)
        summary.add(total_amount, items_sold)

        key = bucket_start(period, row.transaction_date.date())
        if key not in buckets:
            buckets[key] = _Bucket()
        buckets[key].add(total_amount, items_sold)

    if summary.transactions:
        average = quantize_money(summary.revenue / summary.transactions)
    else:
        average = Decimal("0")

    return SalesReportResponse(
        period=period,
        start_date=start.strftime(DATE_FORMAT),
        end_date=end.strftime(DATE_FORMAT),
        summary=SalesReportSummary(
            total_transactions=summary.transactions,
            total_revenue=quantize_money(summary.revenue),
            total_items_sold=summary.items_sold,
            average_transaction_value=average,
        ),
        data=[
            SalesReportItem(
                date=key.strftime(DATE_FORMAT),
                total_transactions=bucket.transactions,
                total_revenue=quantize_money(bucket.revenue),
                total_items_sold=bucket.items_sold,
            )
            for key, bucket in sorted(buckets.items())
        ],
    )
