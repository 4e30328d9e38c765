"""Sale commit service module.

Turns a cart of ``(product_id, quantity)`` pairs into a ledger entry:

1. Merge repeated product ids and load every referenced product in one
   locked read (``SELECT ... FOR UPDATE``).
2. Reject the whole sale if any id is missing or any product would go
   below zero stock. Every line is checked before anything is written.
3. Price each line from the live catalog price, never from the caller.
4. Insert the header, insert one line per product with name and price
   snapshots, and debit stock, all inside one database transaction.

Any failure after the read rolls the session back, so a rejected or failed
sale leaves no header, no lines and no stock change behind.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from umkm_api.exceptions.api_exception import (
    APIException,
    EmptyItemListError,
    InsufficientStockError,
    ProductsNotFoundError,
    StoreUnavailableError,
)
from umkm_api.models.product import Product
from umkm_api.models.sales_transaction import SalesTransaction, SalesTransactionItem
from umkm_api.schemas.product import quantize_money
from umkm_api.schemas.sales_transaction import (
    SaleItemRequest,
    SalesTransactionCreate,
    SalesTransactionResponse,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedLine:
    """A validated sale line priced from the catalog."""

    product: Product
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


def _merge_items(items: Iterable[SaleItemRequest]) -> dict[int, int]:
    """Sum quantities per product id, keeping first-seen order."""
    merged: dict[int, int] = {}
    for item in items:
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    return merged


async def _lock_products(db: AsyncSession, product_ids: list[int]) -> dict[int, Product]:
    """Load the requested products in one read, locking their rows."""
    query = (
        select(Product)
        .where(Product.id.in_(product_ids))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return {product.id: product for product in result.scalars().all()}


def _price_lines(requested: dict[int, int], products: dict[int, Product]) -> list[PricedLine]:
    """
    Validate the merged cart against the locked products and price it.

    Raises:
        ProductsNotFoundError: lists every requested id that does not exist
        InsufficientStockError: the first line whose quantity exceeds stock
    """
    missing = [product_id for product_id in requested if product_id not in products]
    if missing:
        raise ProductsNotFoundError(missing)

    for product_id, quantity in requested.items():
        product = products[product_id]
        if quantity > product.stock_quantity:
            raise InsufficientStockError.for_sale(
                product_id=product.id,
                product_name=product.name,
                available=product.stock_quantity,
                requested=quantity,
            )

    lines = []
    for product_id, quantity in requested.items():
        product = products[product_id]
        unit_price = quantize_money(Decimal(product.price))
        lines.append(PricedLine(
            product=product,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=quantize_money(unit_price * quantity),
        ))
    return lines


async def commit_sale(
    db: AsyncSession,
    data: SalesTransactionCreate,
) -> SalesTransactionResponse:
    """
    Record a sale and debit stock as one all-or-nothing unit.

    Raises:
        EmptyItemListError: no items were supplied (checked before any query)
        ProductsNotFoundError: one or more product ids do not exist
        InsufficientStockError: a line asks for more than is in stock
        StoreUnavailableError: the database failed; nothing was persisted
    """
    if not data.items:
        raise EmptyItemListError()

    requested = _merge_items(data.items)

    try:
        products = await _lock_products(db, list(requested))
        lines = _price_lines(requested, products)

        now = datetime.utcnow()
        total_amount = quantize_money(sum((line.subtotal for line in lines), Decimal("0")))
        transaction = SalesTransaction(
            transaction_date=now,
            total_amount=total_amount,
            notes=data.notes,
            created_at=now,
            items=[
                SalesTransactionItem(
                    product_id=line.product.id,
                    product_name=line.product.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                    created_at=now,
                )
                for line in lines
            ],
        )
        db.add(transaction)

        for line in lines:
            line.product.stock_quantity = line.product.stock_quantity - line.quantity
            line.product.updated_at = now

        await db.flush()
        await db.commit()
    except APIException as exc:
        await db.rollback()
        logger.warning("Sale rejected: %s", exc.detail)
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Sale commit failed, rolled back: %s", exc)
        raise StoreUnavailableError("Could not record sales transaction") from exc

    logger.info(
        "Committed sale %s: %d line(s), total %s",
        transaction.id, len(lines), total_amount,
    )
    return SalesTransactionResponse.model_validate(transaction)


async def get_sales_transactions(db: AsyncSession) -> list[SalesTransactionResponse]:
    """List every transaction with its items, newest first."""
    query = (
        select(SalesTransaction)
        .options(selectinload(SalesTransaction.items))
        .order_by(SalesTransaction.transaction_date.desc(), SalesTransaction.id.desc())
    )
    result = await db.execute(query)
    return [SalesTransactionResponse.model_validate(t) for t in result.scalars().all()]


async def get_transaction_by_id(
    db: AsyncSession,
    transaction_id: int,
) -> Optional[SalesTransactionResponse]:
    """Fetch one transaction with its items, or None if absent."""
    query = (
        select(SalesTransaction)
        .options(selectinload(SalesTransaction.items))
        .where(SalesTransaction.id == transaction_id)
    )
    result = await db.execute(query)
    transaction = result.scalar_one_or_none()
    if transaction is None:
        return None
    return SalesTransactionResponse.model_validate(transaction)
