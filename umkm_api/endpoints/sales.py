"""Sales transaction endpoints module."""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from umkm_api.database.database import get_db
from umkm_api.schemas.sales_transaction import (
    SalesTransactionCreate,
    SalesTransactionResponse,
)
from umkm_api.services.sale_service import (
    commit_sale,
    get_sales_transactions,
    get_transaction_by_id,
)

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("", response_model=SalesTransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_sales_transaction(
    data: SalesTransactionCreate,
    db: AsyncSession = Depends(get_db),
) -> SalesTransactionResponse:
    """
    Record a sale and debit stock atomically.

    Prices come from the catalog at commit time. The whole sale is
    rejected if any product is missing (404) or short on stock (409).
    """
    return await commit_sale(db=db, data=data)


@router.get("", response_model=list[SalesTransactionResponse])
async def list_sales_transactions(
    db: AsyncSession = Depends(get_db),
) -> list[SalesTransactionResponse]:
    """List all transactions with their items, newest first."""
    return await get_sales_transactions(db)


@router.get("/{transaction_id}", response_model=Optional[SalesTransactionResponse])
async def get_sales_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
) -> Optional[SalesTransactionResponse]:
    """Get a transaction with its items, or null if it does not exist."""
    return await get_transaction_by_id(db, transaction_id)
