"""create cart_item and persisted_state tables

Revision ID: 5c1e7a9b2d40
Revises:
Create Date: 2026-10-19 10:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1e7a9b2d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "cart_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("session_id", sa.String(), nullable=False),
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("unit_price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("units_per_item", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_cart_item_session_id", "cart_item", ["session_id"])
    op.create_index("ix_cart_item_product_id", "cart_item", ["product_id"])

    op.create_table(
        "persisted_state",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("session_id", sa.String(), nullable=False),
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("saved_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_persisted_state_session_id", "persisted_state", ["session_id"])
    op.create_index("ix_persisted_state_key", "persisted_state", ["key"])


def downgrade():
    op.drop_index("ix_persisted_state_key", table_name="persisted_state")
    op.drop_index("ix_persisted_state_session_id", table_name="persisted_state")
    op.drop_table("persisted_state")

    op.drop_index("ix_cart_item_product_id", table_name="cart_item")
    op.drop_index("ix_cart_item_session_id", table_name="cart_item")
    op.drop_table("cart_item")
