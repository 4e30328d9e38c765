"""Create sales transaction tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-18 00:00:01.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'sales_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('transaction_date', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('total_amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_sales_transactions_transaction_date'),
        'sales_transactions',
        ['transaction_date'],
        unique=False
    )

    op.create_table(
        'sales_transaction_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(256), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(15, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['transaction_id'], ['sales_transactions.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT'),
        sa.CheckConstraint('quantity > 0', name='ck_sales_transaction_items_quantity_positive'),
    )
    op.create_index(
        op.f('ix_sales_transaction_items_transaction_id'),
        'sales_transaction_items',
        ['transaction_id'],
        unique=False
    )
    op.create_index(
        op.f('ix_sales_transaction_items_product_id'),
        'sales_transaction_items',
        ['product_id'],
        unique=False
    )


def downgrade() -> None:
    op.drop_index(
        op.f('ix_sales_transaction_items_product_id'), table_name='sales_transaction_items'
    )
    op.drop_index(
        op.f('ix_sales_transaction_items_transaction_id'), table_name='sales_transaction_items'
    )
    op.drop_table('sales_transaction_items')
    op.drop_index(
        op.f('ix_sales_transactions_transaction_date'), table_name='sales_transactions'
    )
    op.drop_table('sales_transactions')
