"""create_cart_slots

Revision ID: 3f2a9c41d7e0
Revises:
Create Date: 2026-10-18 10:12:40.118203

"""
from alembic import op
import sqlalchemy as sa


revision = '3f2a9c41d7e0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'cart_slots',
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('payload', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )


def downgrade() -> None:
    op.drop_table('cart_slots')
