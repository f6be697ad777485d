"""Create orders, suppliers, price entries, shipping costs and marketing spend

Revision ID: 3b1f0c2d9a71
Revises:
Create Date: 2026-10-18 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b1f0c2d9a71"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

order_status_class = sa.Enum("active", "cancelled", name="order_status_class")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("channel", sa.String(length=100), nullable=True),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("fulfilled_by", sa.String(length=100), nullable=True),
        sa.Column("delivered_date", sa.Date(), nullable=True),
        sa.Column("product_name", sa.String(length=255), nullable=True),
        sa.Column("order_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("pickup_warehouse", sa.String(length=255), nullable=True),
        sa.Column("order_account", sa.String(length=255), nullable=True),
        sa.Column("waybill_number", sa.String(length=255), nullable=True),
        sa.Column("product_value", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("mode", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=100), nullable=False),
        sa.Column("status_class", order_status_class, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_orders_id"), "orders", ["id"], unique=False)
    op.create_index("ix_orders_order_date", "orders", ["order_date"], unique=False)
    op.create_index("ix_orders_status_class", "orders", ["status_class"], unique=False)

    op.create_table(
        "suppliers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_suppliers_name"),
    )
    op.create_index(op.f("ix_suppliers_id"), "suppliers", ["id"], unique=False)

    op.create_table(
        "price_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("supplier_id", sa.Integer(), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("price_before_gst", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("gst_rate", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("price_after_gst", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("hsn_code", sa.String(length=50), nullable=False),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("effective_to", sa.Date(), nullable=True),
        sa.Column("supplier_product_id", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("supplier_id", "product_name", name="uq_price_entries_supplier_product"),
    )
    op.create_index(op.f("ix_price_entries_id"), "price_entries", ["id"], unique=False)
    op.create_index("ix_price_entries_product_name", "price_entries", ["product_name"], unique=False)
    op.create_index(
        "ix_price_entries_effective", "price_entries", ["effective_from", "effective_to"], unique=False
    )

    op.create_table(
        "shipping_costs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("region", sa.String(length=100), nullable=False),
        sa.Column("weight_range", sa.String(length=100), nullable=False),
        sa.Column("shipping_cost", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shipping_costs_id"), "shipping_costs", ["id"], unique=False)

    op.create_table(
        "marketing_spend",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("spend_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("channel", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_marketing_spend_id"), "marketing_spend", ["id"], unique=False)
    op.create_index(op.f("ix_marketing_spend_spend_date"), "marketing_spend", ["spend_date"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_marketing_spend_spend_date"), table_name="marketing_spend")
    op.drop_index(op.f("ix_marketing_spend_id"), table_name="marketing_spend")
    op.drop_table("marketing_spend")

    op.drop_index(op.f("ix_shipping_costs_id"), table_name="shipping_costs")
    op.drop_table("shipping_costs")

    op.drop_index("ix_price_entries_effective", table_name="price_entries")
    op.drop_index("ix_price_entries_product_name", table_name="price_entries")
    op.drop_index(op.f("ix_price_entries_id"), table_name="price_entries")
    op.drop_table("price_entries")

    op.drop_index(op.f("ix_suppliers_id"), table_name="suppliers")
    op.drop_table("suppliers")

    op.drop_index("ix_orders_status_class", table_name="orders")
    op.drop_index("ix_orders_order_date", table_name="orders")
    op.drop_index(op.f("ix_orders_id"), table_name="orders")
    op.drop_table("orders")

    order_status_class.drop(op.get_bind(), checkfirst=True)
