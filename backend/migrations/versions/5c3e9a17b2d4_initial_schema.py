"""Initial schema: directory, inventory, memberships, transactions, identifier sequences

Revision ID: 5c3e9a17b2d4
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c3e9a17b2d4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "customers",
        sa.Column("id", sa.String(6), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(15), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_customers"),
    )

    op.create_table(
        "staff",
        sa.Column("id", sa.String(6), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(15), nullable=True),
        sa.Column("address", sa.String(100), nullable=True),
        sa.Column("gender", sa.String(1), nullable=True),
        sa.CheckConstraint("gender IS NULL OR gender IN ('M', 'F', 'O')", name="ck_staff_gender"),
        sa.PrimaryKeyConstraint("id", name="pk_staff"),
    )

    op.create_table(
        "printers",
        sa.Column("id", sa.String(6), nullable=False),
        sa.Column("is_operational", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("condition", sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_printers"),
    )

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.String(6), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("stock >= 0", name="ck_inventory_items_stock_non_negative"),
        sa.CheckConstraint("unit_price >= 0", name="ck_inventory_items_price_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_inventory_items"),
    )
    with op.batch_alter_table("inventory_items", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_items_stock", ["stock"], unique=False)

    op.create_table(
        "memberships",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.String(6), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("expires_on", sa.Date(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("points >= 0", name="ck_memberships_points_non_negative"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], name="fk_memberships_customer_id_customers"),
        sa.PrimaryKeyConstraint("id", name="pk_memberships"),
        sa.UniqueConstraint("customer_id", name="uq_memberships_customer"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("memberships", schema=None) as batch_op:
        batch_op.create_index("ix_memberships_customer_expires", ["customer_id", "expires_on"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(6), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", sa.String(10), nullable=True),
        sa.Column("customer_id", sa.String(6), nullable=False),
        sa.Column("paper_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("total_price >= 0", name="ck_transactions_total_non_negative"),
        sa.CheckConstraint("paper_count >= 0", name="ck_transactions_paper_count_non_negative"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], name="fk_transactions_customer_id_customers"),
        sa.PrimaryKeyConstraint("id", name="pk_transactions"),
    )
    with op.batch_alter_table("transactions", schema=None) as batch_op:
        batch_op.create_index("ix_transactions_occurred_at", ["occurred_at"], unique=False)
        batch_op.create_index("ix_transactions_customer_occurred", ["customer_id", "occurred_at"], unique=False)

    op.create_table(
        "transaction_inventory",
        sa.Column("transaction_id", sa.String(6), nullable=False),
        sa.Column("item_id", sa.String(6), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_transaction_inventory_quantity_positive"),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], name="fk_transaction_inventory_transaction_id_transactions"),
        sa.ForeignKeyConstraint(["item_id"], ["inventory_items.id"], name="fk_transaction_inventory_item_id_inventory_items"),
        sa.PrimaryKeyConstraint("transaction_id", "item_id", name="pk_transaction_inventory"),
    )

    op.create_table(
        "staff_transactions",
        sa.Column("staff_id", sa.String(6), nullable=False),
        sa.Column("transaction_id", sa.String(6), nullable=False),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], name="fk_staff_transactions_staff_id_staff"),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], name="fk_staff_transactions_transaction_id_transactions"),
        sa.PrimaryKeyConstraint("staff_id", "transaction_id", name="pk_staff_transactions"),
    )

    op.create_table(
        "printer_transactions",
        sa.Column("printer_id", sa.String(6), nullable=False),
        sa.Column("transaction_id", sa.String(6), nullable=False),
        sa.ForeignKeyConstraint(["printer_id"], ["printers.id"], name="fk_printer_transactions_printer_id_printers"),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], name="fk_printer_transactions_transaction_id_transactions"),
        sa.PrimaryKeyConstraint("printer_id", "transaction_id", name="pk_printer_transactions"),
    )

    op.create_table(
        "identifier_sequences",
        sa.Column("prefix", sa.String(1), nullable=False),
        sa.Column("next_number", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("prefix", name="pk_identifier_sequences"),
    )


def downgrade():
    op.drop_table("identifier_sequences")
    op.drop_table("printer_transactions")
    op.drop_table("staff_transactions")
    op.drop_table("transaction_inventory")
    with op.batch_alter_table("transactions", schema=None) as batch_op:
        batch_op.drop_index("ix_transactions_customer_occurred")
        batch_op.drop_index("ix_transactions_occurred_at")
    op.drop_table("transactions")
    with op.batch_alter_table("memberships", schema=None) as batch_op:
        batch_op.drop_index("ix_memberships_customer_expires")
    op.drop_table("memberships")
    with op.batch_alter_table("inventory_items", schema=None) as batch_op:
        batch_op.drop_index("ix_inventory_items_stock")
    op.drop_table("inventory_items")
    op.drop_table("printers")
    op.drop_table("staff")
    op.drop_table("customers")
