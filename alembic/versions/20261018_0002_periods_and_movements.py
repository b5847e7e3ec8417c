"""periods, location stock and stock movement documents

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261018_0002"
down_revision: Union[str, Sequence[str], None] = "20261018_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    period_status_enum = sa.Enum("DRAFT", "OPEN", "CLOSED", name="periodstatus")
    period_location_status_enum = sa.Enum("OPEN", "READY", "CLOSED", name="periodlocationstatus")
    cost_centre_enum = sa.Enum("FOOD", "CLEAN", "OTHER", name="costcentre")
    transfer_status_enum = sa.Enum(
        "DRAFT",
        "PENDING_APPROVAL",
        "APPROVED",
        "REJECTED",
        "COMPLETED",
        name="transferstatus",
    )

    op.create_table(
        "periods",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", period_status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_periods_id"), "periods", ["id"], unique=False)
    op.create_index(op.f("ix_periods_start_date"), "periods", ["start_date"], unique=False)
    op.create_index(op.f("ix_periods_end_date"), "periods", ["end_date"], unique=False)
    op.create_index(op.f("ix_periods_status"), "periods", ["status"], unique=False)

    op.create_table(
        "period_locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("status", period_location_status_enum, nullable=False),
        sa.Column("opening_value", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("closing_value", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("ready_at", sa.DateTime(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("period_id", "location_id", name="uq_period_locations_period_location"),
    )
    op.create_index(op.f("ix_period_locations_id"), "period_locations", ["id"], unique=False)
    op.create_index(op.f("ix_period_locations_location_id"), "period_locations", ["location_id"], unique=False)
    op.create_index(op.f("ix_period_locations_period_id"), "period_locations", ["period_id"], unique=False)

    op.create_table(
        "location_stock",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("on_hand", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("wac", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("location_id", "item_id", name="uq_location_stock_location_item"),
    )
    op.create_index(op.f("ix_location_stock_id"), "location_stock", ["id"], unique=False)
    op.create_index(op.f("ix_location_stock_item_id"), "location_stock", ["item_id"], unique=False)
    op.create_index(op.f("ix_location_stock_location_id"), "location_stock", ["location_id"], unique=False)

    op.create_table(
        "deliveries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("delivery_no", sa.String(length=50), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("supplier_id", sa.Integer(), nullable=False),
        sa.Column("invoice_no", sa.String(length=100), nullable=True),
        sa.Column("delivery_note", sa.Text(), nullable=True),
        sa.Column("delivery_date", sa.Date(), nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("posted_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_deliveries_delivery_no"), "deliveries", ["delivery_no"], unique=True)
    op.create_index(op.f("ix_deliveries_id"), "deliveries", ["id"], unique=False)
    op.create_index(op.f("ix_deliveries_location_id"), "deliveries", ["location_id"], unique=False)
    op.create_index(op.f("ix_deliveries_period_id"), "deliveries", ["period_id"], unique=False)
    op.create_index(op.f("ix_deliveries_posted_at"), "deliveries", ["posted_at"], unique=False)
    op.create_index(op.f("ix_deliveries_supplier_id"), "deliveries", ["supplier_id"], unique=False)

    op.create_table(
        "delivery_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("delivery_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("line_value", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["delivery_id"], ["deliveries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_delivery_lines_delivery_id"), "delivery_lines", ["delivery_id"], unique=False)
    op.create_index(op.f("ix_delivery_lines_id"), "delivery_lines", ["id"], unique=False)
    op.create_index(op.f("ix_delivery_lines_item_id"), "delivery_lines", ["item_id"], unique=False)

    op.create_table(
        "issues",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("issue_no", sa.String(length=50), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("cost_centre", cost_centre_enum, nullable=False),
        sa.Column("total_value", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("posted_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_issues_id"), "issues", ["id"], unique=False)
    op.create_index(op.f("ix_issues_issue_no"), "issues", ["issue_no"], unique=True)
    op.create_index(op.f("ix_issues_location_id"), "issues", ["location_id"], unique=False)
    op.create_index(op.f("ix_issues_period_id"), "issues", ["period_id"], unique=False)
    op.create_index(op.f("ix_issues_posted_at"), "issues", ["posted_at"], unique=False)

    op.create_table(
        "issue_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("issue_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("wac_at_issue", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("line_value", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["issue_id"], ["issues.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_issue_lines_id"), "issue_lines", ["id"], unique=False)
    op.create_index(op.f("ix_issue_lines_issue_id"), "issue_lines", ["issue_id"], unique=False)
    op.create_index(op.f("ix_issue_lines_item_id"), "issue_lines", ["item_id"], unique=False)

    op.create_table(
        "transfers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("transfer_no", sa.String(length=50), nullable=False),
        sa.Column("from_location_id", sa.Integer(), nullable=False),
        sa.Column("to_location_id", sa.Integer(), nullable=False),
        sa.Column("status", transfer_status_enum, nullable=False),
        sa.Column("request_date", sa.Date(), nullable=False),
        sa.Column("approval_date", sa.Date(), nullable=True),
        sa.Column("transfer_date", sa.Date(), nullable=True),
        sa.Column("total_value", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["from_location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["to_location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_transfers_from_location_id"), "transfers", ["from_location_id"], unique=False)
    op.create_index(op.f("ix_transfers_id"), "transfers", ["id"], unique=False)
    op.create_index(op.f("ix_transfers_status"), "transfers", ["status"], unique=False)
    op.create_index(op.f("ix_transfers_to_location_id"), "transfers", ["to_location_id"], unique=False)
    op.create_index(op.f("ix_transfers_transfer_date"), "transfers", ["transfer_date"], unique=False)
    op.create_index(op.f("ix_transfers_transfer_no"), "transfers", ["transfer_no"], unique=True)

    op.create_table(
        "transfer_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("transfer_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("wac_at_transfer", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("line_value", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.ForeignKeyConstraint(["transfer_id"], ["transfers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_transfer_lines_id"), "transfer_lines", ["id"], unique=False)
    op.create_index(op.f("ix_transfer_lines_item_id"), "transfer_lines", ["item_id"], unique=False)
    op.create_index(op.f("ix_transfer_lines_transfer_id"), "transfer_lines", ["transfer_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_transfer_lines_transfer_id"), table_name="transfer_lines")
    op.drop_index(op.f("ix_transfer_lines_item_id"), table_name="transfer_lines")
    op.drop_index(op.f("ix_transfer_lines_id"), table_name="transfer_lines")
    op.drop_table("transfer_lines")

    op.drop_index(op.f("ix_transfers_transfer_no"), table_name="transfers")
    op.drop_index(op.f("ix_transfers_transfer_date"), table_name="transfers")
    op.drop_index(op.f("ix_transfers_to_location_id"), table_name="transfers")
    op.drop_index(op.f("ix_transfers_status"), table_name="transfers")
    op.drop_index(op.f("ix_transfers_id"), table_name="transfers")
    op.drop_index(op.f("ix_transfers_from_location_id"), table_name="transfers")
    op.drop_table("transfers")

    op.drop_index(op.f("ix_issue_lines_item_id"), table_name="issue_lines")
    op.drop_index(op.f("ix_issue_lines_issue_id"), table_name="issue_lines")
    op.drop_index(op.f("ix_issue_lines_id"), table_name="issue_lines")
    op.drop_table("issue_lines")

    op.drop_index(op.f("ix_issues_posted_at"), table_name="issues")
    op.drop_index(op.f("ix_issues_period_id"), table_name="issues")
    op.drop_index(op.f("ix_issues_location_id"), table_name="issues")
    op.drop_index(op.f("ix_issues_issue_no"), table_name="issues")
    op.drop_index(op.f("ix_issues_id"), table_name="issues")
    op.drop_table("issues")

    op.drop_index(op.f("ix_delivery_lines_item_id"), table_name="delivery_lines")
    op.drop_index(op.f("ix_delivery_lines_id"), table_name="delivery_lines")
    op.drop_index(op.f("ix_delivery_lines_delivery_id"), table_name="delivery_lines")
    op.drop_table("delivery_lines")

    op.drop_index(op.f("ix_deliveries_supplier_id"), table_name="deliveries")
    op.drop_index(op.f("ix_deliveries_posted_at"), table_name="deliveries")
    op.drop_index(op.f("ix_deliveries_period_id"), table_name="deliveries")
    op.drop_index(op.f("ix_deliveries_location_id"), table_name="deliveries")
    op.drop_index(op.f("ix_deliveries_id"), table_name="deliveries")
    op.drop_index(op.f("ix_deliveries_delivery_no"), table_name="deliveries")
    op.drop_table("deliveries")

    op.drop_index(op.f("ix_location_stock_location_id"), table_name="location_stock")
    op.drop_index(op.f("ix_location_stock_item_id"), table_name="location_stock")
    op.drop_index(op.f("ix_location_stock_id"), table_name="location_stock")
    op.drop_table("location_stock")

    op.drop_index(op.f("ix_period_locations_period_id"), table_name="period_locations")
    op.drop_index(op.f("ix_period_locations_location_id"), table_name="period_locations")
    op.drop_index(op.f("ix_period_locations_id"), table_name="period_locations")
    op.drop_table("period_locations")

    op.drop_index(op.f("ix_periods_status"), table_name="periods")
    op.drop_index(op.f("ix_periods_end_date"), table_name="periods")
    op.drop_index(op.f("ix_periods_start_date"), table_name="periods")
    op.drop_index(op.f("ix_periods_id"), table_name="periods")
    op.drop_table("periods")

    bind = op.get_bind()
    sa.Enum(name="transferstatus").drop(bind, checkfirst=True)
    sa.Enum(name="costcentre").drop(bind, checkfirst=True)
    sa.Enum(name="periodlocationstatus").drop(bind, checkfirst=True)
    sa.Enum(name="periodstatus").drop(bind, checkfirst=True)
