"""Initial schema for stores, catalog, stock entries and the inventory ledger

Revision ID: 001_initial_schema
Revises:
Create Date: 2024-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Stores (the production center is one of them, matched by name)
    op.create_table(
        'stores',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('delivery_schedule', sa.String(20), nullable=False, server_default='daily'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    # Catalog
    op.create_table(
        'ingredients',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('cost_per_unit', sa.Numeric(10, 4), nullable=False),
        sa.Column('unit', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('unit_cost', sa.Numeric(10, 4), nullable=False, server_default='0'),
        sa.Column('selling_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('min_stock_level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_waste_percent', sa.Float(), nullable=False, server_default='5.0'),
        sa.Column('batch_yield', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    op.create_table(
        'recipes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ingredient_id', sa.Uuid(), sa.ForeignKey('ingredients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity', sa.Numeric(10, 4), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_recipes_product_id', 'recipes', ['product_id'])
    op.create_index('ix_recipes_ingredient_id', 'recipes', ['ingredient_id'])

    # Stock counts
    op.create_table(
        'stock_entries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('store_id', sa.Uuid(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('delivered', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reported_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('waste', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sales', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expected_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reported_remaining', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('discrepancy', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint('date', 'product_id', 'store_id', name='uq_stock_entry_date_product_store'),
    )
    op.create_index(
        'idx_stock_entries_product_store_date', 'stock_entries', ['product_id', 'store_id', 'date']
    )

    op.create_table(
        'deliveries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('store_id', sa.Uuid(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity_sent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_deliveries_date', 'deliveries', ['date'])

    op.create_table(
        'sales',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('store_id', sa.Uuid(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('source', sa.String(50), nullable=False, server_default='manual'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_sales_date', 'sales', ['date'])

    # Inventory ledger and running totals
    op.create_table(
        'inventory',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('store_id', sa.Uuid(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('movement_type', sa.String(50), nullable=False),
        sa.Column('quantity_produced', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('quantity_change', sa.Integer(), nullable=False),
        sa.Column('quantity_in_stock', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_inventory_product_id', 'inventory', ['product_id'])
    op.create_index('ix_inventory_store_id', 'inventory', ['store_id'])

    op.create_table(
        'inventory_levels',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('store_id', sa.Uuid(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint('product_id', 'store_id', name='uq_inventory_level_product_store'),
    )


def downgrade() -> None:
    op.drop_table('inventory_levels')
    op.drop_table('inventory')
    op.drop_table('sales')
    op.drop_table('deliveries')
    op.drop_table('stock_entries')
    op.drop_table('recipes')
    op.drop_table('products')
    op.drop_table('ingredients')
    op.drop_table('stores')
