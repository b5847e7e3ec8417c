"""daily POB and period reconciliations

Revision ID: 20261018_0003
Revises: 20261018_0002
Create Date: 2026-10-18 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261018_0003"
down_revision: Union[str, Sequence[str], None] = "20261018_0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "pob",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("crew_count", sa.Integer(), nullable=False),
        sa.Column("extra_count", sa.Integer(), nullable=False),
        sa.Column("entered_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("period_id", "location_id", "date", name="uq_pob_period_location_date"),
    )
    op.create_index(op.f("ix_pob_id"), "pob", ["id"], unique=False)
    op.create_index(op.f("ix_pob_location_id"), "pob", ["location_id"], unique=False)
    op.create_index(op.f("ix_pob_period_id"), "pob", ["period_id"], unique=False)

    op.create_table(
        "reconciliations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("period_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("opening_stock", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("receipts", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("transfers_in", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("transfers_out", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("issues", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("closing_stock", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("adjustments", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("back_charges", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("credits", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("condemnations", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("period_id", "location_id", name="uq_reconciliations_period_location"),
    )
    op.create_index(op.f("ix_reconciliations_id"), "reconciliations", ["id"], unique=False)
    op.create_index(op.f("ix_reconciliations_location_id"), "reconciliations", ["location_id"], unique=False)
    op.create_index(op.f("ix_reconciliations_period_id"), "reconciliations", ["period_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_reconciliations_period_id"), table_name="reconciliations")
    op.drop_index(op.f("ix_reconciliations_location_id"), table_name="reconciliations")
    op.drop_index(op.f("ix_reconciliations_id"), table_name="reconciliations")
    op.drop_table("reconciliations")

    op.drop_index(op.f("ix_pob_period_id"), table_name="pob")
    op.drop_index(op.f("ix_pob_location_id"), table_name="pob")
    op.drop_index(op.f("ix_pob_id"), table_name="pob")
    op.drop_table("pob")
