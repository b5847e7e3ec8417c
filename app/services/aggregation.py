from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.inventory import (
    Delivery,
    DeliveryLine,
    Issue,
    IssueLine,
    Location,
    LocationStock,
    Transfer,
    TransferLine,
    TransferStatus,
)
from app.models.period import POB, Period, Reconciliation
from app.services.errors import DataUnavailable
from app.services.reconciliation import ZERO, round_money


@dataclass(frozen=True)
class MovementTotals:
    opening_stock: Decimal
    receipts: Decimal
    transfers_in: Decimal
    transfers_out: Decimal
    issues: Decimal
    closing_stock: Decimal


def _sum(values) -> Decimal:
    return sum((Decimal(value) for value in values), ZERO)


def receipts_value(db: Session, location_id: int, period_id: int) -> Decimal:
    return _sum(
        db.scalars(
            select(DeliveryLine.line_value)
            .join(Delivery, Delivery.id == DeliveryLine.delivery_id)
            .where(Delivery.location_id == location_id, Delivery.period_id == period_id)
        )
    )


def issues_value(db: Session, location_id: int, period_id: int) -> Decimal:
    return _sum(
        db.scalars(
            select(IssueLine.line_value)
            .join(Issue, Issue.id == IssueLine.issue_id)
            .where(Issue.location_id == location_id, Issue.period_id == period_id)
        )
    )


def _completed_transfer_lines(start_date: date, end_date: date):
    return (
        select(TransferLine.line_value)
        .join(Transfer, Transfer.id == TransferLine.transfer_id)
        .where(
            Transfer.status == TransferStatus.COMPLETED,
            Transfer.transfer_date >= start_date,
            Transfer.transfer_date <= end_date,
        )
    )


def transfers_in_value(db: Session, location_id: int, start_date: date, end_date: date) -> Decimal:
    query = _completed_transfer_lines(start_date, end_date).where(Transfer.to_location_id == location_id)
    return _sum(db.scalars(query))


def transfers_out_value(db: Session, location_id: int, start_date: date, end_date: date) -> Decimal:
    query = _completed_transfer_lines(start_date, end_date).where(Transfer.from_location_id == location_id)
    return _sum(db.scalars(query))


def closing_stock_value(db: Session, location_id: int) -> Decimal:
    # Point-in-time snapshot of current stock, not scoped to the period.
    rows = db.execute(
        select(LocationStock.on_hand, LocationStock.wac).where(LocationStock.location_id == location_id)
    ).all()
    return round_money(_sum(Decimal(on_hand) * Decimal(wac) for on_hand, wac in rows))


def previous_period(db: Session, period: Period) -> Period | None:
    return db.scalar(
        select(Period)
        .where(Period.end_date < period.start_date)
        .order_by(Period.end_date.desc())
        .limit(1)
    )


def opening_stock_value(db: Session, location_id: int, period: Period) -> Decimal:
    prior = previous_period(db, period)
    if not prior:
        return ZERO
    prior_reconciliation = db.scalar(
        select(Reconciliation).where(
            Reconciliation.period_id == prior.id,
            Reconciliation.location_id == location_id,
        )
    )
    if not prior_reconciliation:
        return ZERO
    return Decimal(prior_reconciliation.closing_stock)


def total_mandays(db: Session, location_id: int, period_id: int) -> int:
    total = db.scalar(
        select(func.coalesce(func.sum(POB.crew_count + POB.extra_count), 0)).where(
            POB.location_id == location_id,
            POB.period_id == period_id,
        )
    )
    return int(total or 0)


def aggregate_movements(
    db: Session,
    location_id: int,
    period_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
) -> MovementTotals:
    location = db.get(Location, location_id)
    if not location:
        raise DataUnavailable(f"Location not found: {location_id}")
    period = db.get(Period, period_id)
    if not period:
        raise DataUnavailable(f"Period not found: {period_id}")

    window_start = start_date or period.start_date
    window_end = end_date or period.end_date
    return MovementTotals(
        opening_stock=opening_stock_value(db, location_id, period),
        receipts=receipts_value(db, location_id, period_id),
        transfers_in=transfers_in_value(db, location_id, window_start, window_end),
        transfers_out=transfers_out_value(db, location_id, window_start, window_end),
        issues=issues_value(db, location_id, period_id),
        closing_stock=closing_stock_value(db, location_id),
    )
