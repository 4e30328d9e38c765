"""Product catalog endpoints module."""
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from umkm_api.database.database import get_db
from umkm_api.schemas.product import (
    DeleteProductResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProductWithSalesResponse,
    StockAdjustmentRequest,
)
from umkm_api.services.product_service import (
    create_product,
    delete_product,
    get_product_by_id,
    get_products,
    get_products_with_sales,
    update_product,
)
from umkm_api.services.stock_service import adjust_stock

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product_endpoint(
    data: ProductCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """
    Create a product.

    **min_stock_threshold** defaults to the configured threshold (10) when omitted.
    Prices are rounded to 2 decimal places.
    """
    return await create_product(
        db=db,
        data=data,
        default_min_stock_threshold=request.app.state.settings.DEFAULT_MIN_STOCK_THRESHOLD,
    )


@router.get("", response_model=list[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_db)) -> list[ProductResponse]:
    """List all products ordered by name."""
    return await get_products(db)


@router.get("/with-sales", response_model=list[ProductWithSalesResponse])
async def list_products_with_sales(
    db: AsyncSession = Depends(get_db),
) -> list[ProductWithSalesResponse]:
    """
    List products with lifetime sales.

    - **total_sold**: units sold across every transaction
    - **total_revenue**: sum of line subtotals

    Best sellers by revenue come first; never-sold products report zero.
    """
    return await get_products_with_sales(db)


@router.get("/{product_id}", response_model=Optional[ProductResponse])
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
) -> Optional[ProductResponse]:
    """Get a product by ID, or null if it does not exist."""
    return await get_product_by_id(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product_endpoint(
    product_id: int,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Update a product. Only the supplied fields change."""
    return await update_product(db=db, product_id=product_id, data=data)


@router.delete("/{product_id}", response_model=DeleteProductResponse)
async def delete_product_endpoint(
    product_id: int,
    db: AsyncSession = Depends(get_db),
) -> DeleteProductResponse:
    """
    Delete a product.

    Rejected with 409 if the product appears in any sales transaction.
    """
    success = await delete_product(db=db, product_id=product_id)
    return DeleteProductResponse(success=success)


@router.post("/{product_id}/stock", response_model=ProductResponse)
async def update_stock(
    product_id: int,
    data: StockAdjustmentRequest,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """
    Adjust stock by a signed quantity.

    - **quantity_change**: positive to restock, negative to write off
    - **reason**: optional note, logged only

    Rejected with 409 if stock would go below zero.
    """
    return await adjust_stock(
        db=db,
        product_id=product_id,
        quantity_change=data.quantity_change,
        reason=data.reason,
    )
