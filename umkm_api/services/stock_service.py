"""Stock service module.

Manual stock adjustments (restock, write-off, correction) and the
low-stock list used to drive reordering.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from umkm_api.exceptions.api_exception import (
    APIException,
    InsufficientStockError,
    ProductNotFoundError,
    StoreUnavailableError,
    ValidationFailedError,
)
from umkm_api.models.product import Product
from umkm_api.schemas.inventory import LowStockItem
from umkm_api.schemas.product import MAX_QUANTITY, ProductResponse

logger = logging.getLogger(__name__)


async def adjust_stock(
    db: AsyncSession,
    product_id: int,
    quantity_change: int,
    reason: Optional[str] = None,
) -> ProductResponse:
    """
    Apply a signed delta to one product's stock.

    A zero delta is accepted and only refreshes ``updated_at``. ``reason``
    is logged with the adjustment but not stored.

    Raises:
        ProductNotFoundError: the id does not exist
        InsufficientStockError: the result would be negative; nothing is written
        ValidationFailedError: the result would overflow the stock column
        StoreUnavailableError: the database failed
    """
    try:
        query = (
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        product = (await db.execute(query)).scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError(product_id)

        current_stock = product.stock_quantity
        new_stock = current_stock + quantity_change
        if new_stock < 0:
            raise InsufficientStockError.for_adjustment(
                product_id=product_id,
                current_stock=current_stock,
                attempted_change=quantity_change,
            )
        if new_stock > MAX_QUANTITY:
            raise ValidationFailedError(
                f"Stock cannot exceed {MAX_QUANTITY}. Current stock: {current_stock}, "
                f"Attempted change: {quantity_change}"
            )

        product.stock_quantity = new_stock
        product.updated_at = datetime.utcnow()
        await db.commit()
    except APIException as exc:
        await db.rollback()
        logger.warning("Stock adjustment for product %s rejected: %s", product_id, exc.detail)
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Stock adjustment for product %s failed: %s", product_id, exc)
        raise StoreUnavailableError("Could not update stock") from exc

    logger.info(
        "Adjusted stock of product %s: %d -> %d (reason: %s)",
        product_id, current_stock, new_stock, reason or "-",
    )
    return ProductResponse.model_validate(product)


async def list_low_stock(db: AsyncSession) -> list[LowStockItem]:
    """
    Products whose stock is at or below their reorder threshold.

    Ordered by ``difference`` (threshold minus stock) descending, so the
    most critical shortage comes first; ties are broken by id.
    """
    difference = (Product.min_stock_threshold - Product.stock_quantity).label("difference")
    query = (
        select(
            Product.id,
            Product.name,
            Product.stock_quantity,
            Product.min_stock_threshold,
            difference,
        )
        .where(Product.stock_quantity <= Product.min_stock_threshold)
        .order_by(difference.desc(), Product.id)
    )
    result = await db.execute(query)

    return [
        LowStockItem(
            id=row.id,
            name=row.name,
            current_stock=row.stock_quantity,
            min_stock_threshold=row.min_stock_threshold,
            difference=row.difference,
        )
        for row in result.all()
    ]
