"""Standing delivery orders per store and product

Revision ID: 002_predetermined_deliveries
Revises: 001_initial_schema
Create Date: 2024-03-15

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002_predetermined_deliveries'
down_revision: Union[str, None] = '001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'predetermined_deliveries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('store_id', sa.Uuid(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('default_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('frequency', sa.String(20), nullable=False, server_default='daily'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint('store_id', 'product_id', name='uq_predetermined_delivery_store_product'),
    )


def downgrade() -> None:
    op.drop_table('predetermined_deliveries')
