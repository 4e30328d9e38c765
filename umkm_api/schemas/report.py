"""Sales report schemas module."""
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class ReportPeriod(str, Enum):
    """Bucket granularity for sales reports."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SalesReportSummary(BaseModel):
    """Totals over the whole report range."""

    total_transactions: int = 0
    total_revenue: Decimal = Decimal("0")
    total_items_sold: int = 0
    average_transaction_value: Decimal = Decimal("0")


class SalesReportItem(BaseModel):
    """Totals for one calendar bucket."""

    date: str = Field(..., description="First day of the bucket in YYYY-MM-DD format")
    total_transactions: int
    total_revenue: Decimal
    total_items_sold: int


class SalesReportResponse(BaseModel):
    """Response schema for the sales report endpoint."""

    period: ReportPeriod
    start_date: str = Field(..., description="YYYY-MM-DD")
    end_date: str = Field(..., description="Resolved inclusive end date, YYYY-MM-DD")
    summary: SalesReportSummary
    data: list[SalesReportItem] = Field(default_factory=list)
