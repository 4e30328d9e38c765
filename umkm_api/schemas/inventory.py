"""Inventory schemas module."""
from pydantic import BaseModel, Field


class LowStockItem(BaseModel):
    """Product at or below its reorder threshold."""

    id: int
    name: str
    current_stock: int
    min_stock_threshold: int
    difference: int = Field(
        ..., description="min_stock_threshold - current_stock; larger is more critical"
    )
