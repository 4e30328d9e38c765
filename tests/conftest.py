"""Pytest fixtures for async SQLite test database."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from umkm_api.app import create_app
from umkm_api.database.database import Base, get_db
from umkm_api.models.product import Product
from umkm_api.models.sales_transaction import SalesTransaction, SalesTransactionItem
from umkm_api.settings import Settings


def _enable_sqlite_fk(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def db_session():
    """Create an in-memory SQLite async session for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_fk)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def make_product(db_session):
    """Factory that inserts a product row directly."""

    async def _make(
        name: str = "Test Product",
        price: str = "100.00",
        stock_quantity: int = 50,
        min_stock_threshold: int = 10,
        description: Optional[str] = None,
    ) -> Product:
        product = Product(
            name=name,
            description=description,
            price=Decimal(price),
            stock_quantity=stock_quantity,
            min_stock_threshold=min_stock_threshold,
        )
        db_session.add(product)
        await db_session.commit()
        return product

    return _make


@pytest_asyncio.fixture
async def make_transaction(db_session):
    """Factory that writes a ledger entry directly, bypassing stock checks.

    ``lines`` is a list of ``(product, quantity, unit_price)`` tuples. The
    header total is taken from ``total_amount`` when given, otherwise from
    the sum of the line subtotals.
    """

    async def _make(
        transaction_date: datetime,
        lines: list,
        total_amount: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SalesTransaction:
        items = [
            SalesTransactionItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=Decimal(unit_price),
                subtotal=Decimal(unit_price) * quantity,
            )
            for product, quantity, unit_price in lines
        ]
        total = Decimal(total_amount) if total_amount is not None else sum(
            (item.subtotal for item in items), Decimal("0")
        )
        transaction = SalesTransaction(
            transaction_date=transaction_date,
            total_amount=total,
            notes=notes,
            items=items,
        )
        db_session.add(transaction)
        await db_session.commit()
        return transaction

    return _make


@pytest_asyncio.fixture
async def reload_product(db_session):
    """Re-read a product from the database, bypassing the identity map."""

    async def _reload(product_id: int) -> Optional[Product]:
        return await db_session.get(Product, product_id, populate_existing=True)

    return _reload


@pytest_asyncio.fixture
async def count_rows(db_session):
    """Count the rows of a mapped table."""

    async def _count(model) -> int:
        return await db_session.scalar(select(func.count()).select_from(model))

    return _count


@pytest_asyncio.fixture
async def client(db_session):
    """HTTP client bound to an app that uses the test session."""
    app = create_app(Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:"))

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
