"""Sales report endpoints module."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from umkm_api.database.database import get_db
from umkm_api.schemas.report import ReportPeriod, SalesReportResponse
from umkm_api.services.report_service import build_report

router = APIRouter(prefix="/reports", tags=["reports"])

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


@router.get("/sales", response_model=SalesReportResponse)
async def get_sales_report(
    period: ReportPeriod = Query(..., description="daily, weekly, monthly or yearly"),
    start_date: str = Query(
        ...,
        pattern=DATE_PATTERN,
        description="First day of the report (YYYY-MM-DD)",
    ),
    end_date: Optional[str] = Query(
        default=None,
        pattern=DATE_PATTERN,
        description="Last day of the report, inclusive (YYYY-MM-DD); derived from period if omitted",
    ),
    db: AsyncSession = Depends(get_db),
) -> SalesReportResponse:
    """
    Get a sales report for a date range.

    Returns:
    - **summary**: total_transactions, total_revenue, total_items_sold, average_transaction_value
    - **data**: the same totals per day, week, month or year, oldest first
    """
    return await build_report(
        db=db,
        period=period,
        start_date=start_date,
        end_date=end_date,
    )
