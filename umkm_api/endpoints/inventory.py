"""Inventory endpoints module."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from umkm_api.database.database import get_db
from umkm_api.schemas.inventory import LowStockItem
from umkm_api.services.stock_service import list_low_stock

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("/low-stock", response_model=list[LowStockItem])
async def get_low_stock_items(db: AsyncSession = Depends(get_db)) -> list[LowStockItem]:
    """
    Products at or below their reorder threshold.

    Sorted by **difference** (threshold - stock), most critical first.
    """
    return await list_low_stock(db)
