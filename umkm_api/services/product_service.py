"""Product catalog service module.

Plain create/read/update/delete on ``Product`` plus the lifetime sales
roll-up used by the catalog screen. The only business rule here is that a
product which appears in any sale line can no longer be deleted.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from umkm_api.exceptions.api_exception import (
    ProductHasSalesHistoryError,
    ProductNotFoundError,
    StoreUnavailableError,
)
from umkm_api.models.product import Product
from umkm_api.models.sales_transaction import SalesTransactionItem
from umkm_api.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProductWithSalesResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_STOCK_THRESHOLD = 10


async def create_product(
    db: AsyncSession,
    data: ProductCreate,
    default_min_stock_threshold: int = DEFAULT_MIN_STOCK_THRESHOLD,
) -> ProductResponse:
    """Insert a new catalog entry."""
    threshold = data.min_stock_threshold
    if threshold is None:
        threshold = default_min_stock_threshold

    now = datetime.utcnow()
    product = Product(
        name=data.name,
        description=data.description,
        price=data.price,
        stock_quantity=data.stock_quantity,
        min_stock_threshold=threshold,
        created_at=now,
        updated_at=now,
    )
    db.add(product)
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Product creation failed: %s", exc)
        raise StoreUnavailableError("Could not create product") from exc

    return ProductResponse.model_validate(product)


async def get_products(db: AsyncSession) -> list[ProductResponse]:
    """List every product ordered by name."""
    result = await db.execute(select(Product).order_by(Product.name, Product.id))
    return [ProductResponse.model_validate(p) for p in result.scalars().all()]


async def get_product_by_id(db: AsyncSession, product_id: int) -> Optional[ProductResponse]:
    """Fetch a product, or None if the id does not exist."""
    product = await db.get(Product, product_id)
    if product is None:
        return None
    return ProductResponse.model_validate(product)


async def update_product(
    db: AsyncSession,
    product_id: int,
    data: ProductUpdate,
) -> ProductResponse:
    """Apply the supplied fields to a product and refresh ``updated_at``."""
    product = await db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    # Update only provided fields
    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(product, field, value)
    product.updated_at = datetime.utcnow()

    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Product %s update failed: %s", product_id, exc)
        raise StoreUnavailableError("Could not update product") from exc

    return ProductResponse.model_validate(product)


async def delete_product(db: AsyncSession, product_id: int) -> bool:
    """
    Hard-delete a product that has never been sold.

    Raises:
        ProductNotFoundError: the id does not exist
        ProductHasSalesHistoryError: a sale line references the product
    """
    product = await db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    sold_query = (
        select(SalesTransactionItem.id)
        .where(SalesTransactionItem.product_id == product_id)
        .limit(1)
    )
    sold = (await db.execute(sold_query)).first()
    if sold is not None:
        logger.warning("Refusing to delete product %s: it has sales history", product_id)
        raise ProductHasSalesHistoryError(product_id)

    try:
        await db.delete(product)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Product %s deletion failed: %s", product_id, exc)
        raise StoreUnavailableError("Could not delete product") from exc

    logger.info("Deleted product %s", product_id)
    return True


async def get_products_with_sales(db: AsyncSession) -> list[ProductWithSalesResponse]:
    """
    List products with lifetime units sold and revenue.

    Products never sold report zero for both figures. Ordered by revenue,
    highest first; ties fall back to name.
    """
    sales = (
        select(
            SalesTransactionItem.product_id,
            func.sum(SalesTransactionItem.quantity).label("total_sold"),
            func.sum(SalesTransactionItem.subtotal).label("total_revenue"),
        )
        .group_by(SalesTransactionItem.product_id)
        .subquery()
    )
    total_revenue = func.coalesce(sales.c.total_revenue, 0)
    query = (
        select(
            Product,
            func.coalesce(sales.c.total_sold, 0).label("total_sold"),
            total_revenue.label("total_revenue"),
        )
        .outerjoin(sales, sales.c.product_id == Product.id)
        .order_by(total_revenue.desc(), Product.name, Product.id)
    )
    result = await db.execute(query)

    items = []
    for product, total_sold, revenue in result.all():
        base = ProductResponse.model_validate(product)
        items.append(ProductWithSalesResponse(
            **base.model_dump(),
            total_sold=int(total_sold or 0),
            total_revenue=Decimal(str(revenue or 0)).quantize(Decimal("0.01")),
        ))
    return items
