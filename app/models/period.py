from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class PeriodStatus(str, Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class PeriodLocationStatus(str, Enum):
    OPEN = "OPEN"
    READY = "READY"
    CLOSED = "CLOSED"


class Period(Base):
    __tablename__ = "periods"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    status: Mapped[PeriodStatus] = mapped_column(
        SQLEnum(PeriodStatus),
        default=PeriodStatus.DRAFT,
        index=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class PeriodLocation(Base):
    __tablename__ = "period_locations"
    __table_args__ = (UniqueConstraint("period_id", "location_id", name="uq_period_locations_period_location"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    period_id: Mapped[int] = mapped_column(ForeignKey("periods.id", ondelete="CASCADE"), index=True, nullable=False)
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    status: Mapped[PeriodLocationStatus] = mapped_column(
        SQLEnum(PeriodLocationStatus),
        default=PeriodLocationStatus.OPEN,
        nullable=False,
    )
    opening_value: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)
    closing_value: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)
    ready_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class POB(Base):
    __tablename__ = "pob"
    __table_args__ = (UniqueConstraint("period_id", "location_id", "date", name="uq_pob_period_location_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    period_id: Mapped[int] = mapped_column(ForeignKey("periods.id", ondelete="CASCADE"), index=True, nullable=False)
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    entry_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    crew_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    extra_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    entered_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


class Reconciliation(Base):
    __tablename__ = "reconciliations"
    __table_args__ = (UniqueConstraint("period_id", "location_id", name="uq_reconciliations_period_location"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    period_id: Mapped[int] = mapped_column(ForeignKey("periods.id", ondelete="CASCADE"), index=True, nullable=False)
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    # Baseline aggregates, written once when the row is created.
    opening_stock: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    receipts: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    transfers_in: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    transfers_out: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    issues: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    closing_stock: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    # User-editable adjustments.
    adjustments: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    back_charges: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    credits: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    condemnations: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
