"""Product schemas module for catalog operations."""
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

CENT = Decimal("0.01")

# Largest values the products columns hold: Numeric(12, 2) and a 32-bit Integer
MAX_PRICE = Decimal("9999999999.99")
MAX_QUANTITY = 2_147_483_647


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary amount half-up to 2 decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class ProductCreate(BaseModel):
    """Schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=256, description="Product name")
    description: Optional[str] = Field(None, description="Optional product description")
    price: Decimal = Field(..., gt=0, le=MAX_PRICE, description="Unit price")
    stock_quantity: int = Field(..., ge=0, le=MAX_QUANTITY, description="Units on hand")
    min_stock_threshold: Optional[int] = Field(
        None,
        ge=0,
        le=MAX_QUANTITY,
        description="Reorder threshold (defaults to the configured value)",
    )

    @field_validator("price")
    @classmethod
    def round_price(cls, value: Decimal) -> Decimal:
        rounded = quantize_money(value)
        if rounded <= 0:
            raise ValueError("Price must be positive")
        # 9999999999.995 passes the field bound but rounds past it
        if rounded > MAX_PRICE:
            raise ValueError(f"Price must not exceed {MAX_PRICE}")
        return rounded


class ProductUpdate(BaseModel):
    """Schema for updating a product (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=256)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, le=MAX_PRICE)
    stock_quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    min_stock_threshold: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)

    @field_validator("price")
    @classmethod
    def round_price(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        if value is None:
            return value
        rounded = quantize_money(value)
        if rounded <= 0:
            raise ValueError("Price must be positive")
        if rounded > MAX_PRICE:
            raise ValueError(f"Price must not exceed {MAX_PRICE}")
        return rounded

    @field_validator("name", "stock_quantity", "min_stock_threshold", "price")
    @classmethod
    def reject_explicit_null(cls, value):
        # These columns are NOT NULL; only ``description`` may be cleared
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class ProductResponse(BaseModel):
    """Schema for product response."""

    id: int = Field(..., description="Product ID")
    name: str
    description: Optional[str] = None
    price: Decimal
    stock_quantity: int
    min_stock_threshold: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductWithSalesResponse(ProductResponse):
    """Product with lifetime sales figures."""

    total_sold: int = Field(..., description="Units sold across all transactions")
    total_revenue: Decimal = Field(..., description="Sum of line subtotals for this product")


class DeleteProductResponse(BaseModel):
    """Schema for product deletion result."""

    success: bool


class StockAdjustmentRequest(BaseModel):
    """Schema for a manual stock adjustment."""

    quantity_change: int = Field(
        ..., ge=-MAX_QUANTITY, le=MAX_QUANTITY,
        description="Signed delta: positive to restock, negative to write off"
    )
    reason: Optional[str] = Field(None, max_length=512, description="Why the stock changed")
