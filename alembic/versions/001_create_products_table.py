"""create products table

Revision ID: 001
Revises: 
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True),
        sa.Column('product_name', sa.Text(), nullable=False),  # intentionally not indexed
        sa.Column('serial_number', sa.Text(), nullable=False),
        sa.Column('category', sa.Text()),
        sa.Column('price', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_index('idx_serial_number', 'products', ['serial_number'], unique=True)


def downgrade() -> None:
    op.drop_index('idx_serial_number', table_name='products')
    op.drop_table('products')
