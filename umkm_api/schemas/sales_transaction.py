"""Sales transaction schemas module."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from umkm_api.schemas.product import MAX_QUANTITY


class SaleItemRequest(BaseModel):
    """One requested product line of a sale."""

    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY, description="Units to sell")


class SalesTransactionCreate(BaseModel):
    """Schema for committing a sale."""

    items: list[SaleItemRequest] = Field(..., description="Products and quantities sold")
    notes: Optional[str] = Field(None, description="Optional notes")


class SalesTransactionItemResponse(BaseModel):
    """Schema for a committed line item."""

    id: int
    transaction_id: int
    product_id: int
    product_name: str = Field(..., description="Product name at time of sale")
    quantity: int
    unit_price: Decimal = Field(..., description="Unit price at time of sale")
    subtotal: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class SalesTransactionResponse(BaseModel):
    """Schema for a transaction header with its line items."""

    id: int
    transaction_date: datetime
    total_amount: Decimal
    notes: Optional[str] = None
    created_at: datetime
    items: list[SalesTransactionItemResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True
