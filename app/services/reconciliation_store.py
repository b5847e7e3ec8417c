import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.period import Period, Reconciliation
from app.services.aggregation import aggregate_movements, total_mandays
from app.services.errors import ConcurrentCreationConflict
from app.services.reconciliation import (
    ZERO,
    ConsumptionInput,
    ReconciliationCalculation,
    calculate_reconciliation,
    round_money,
    to_decimal,
)

logger = logging.getLogger(__name__)

ADJUSTMENT_FIELDS = ("back_charges", "credits", "condemnations", "adjustments")


@dataclass(frozen=True)
class ReconciliationOutcome:
    reconciliation: Reconciliation
    calculation: ReconciliationCalculation
    created: bool = False
    is_auto_calculated: bool = False


def find_reconciliation(db: Session, period_id: int, location_id: int) -> Reconciliation | None:
    return db.scalar(
        select(Reconciliation).where(
            Reconciliation.period_id == period_id,
            Reconciliation.location_id == location_id,
        )
    )


def build_baseline(db: Session, period: Period, location_id: int) -> Reconciliation:
    totals = aggregate_movements(db, location_id, period.id, period.start_date, period.end_date)
    return Reconciliation(
        period_id=period.id,
        location_id=location_id,
        opening_stock=round_money(totals.opening_stock),
        receipts=round_money(totals.receipts),
        transfers_in=round_money(totals.transfers_in),
        transfers_out=round_money(totals.transfers_out),
        issues=round_money(totals.issues),
        closing_stock=round_money(totals.closing_stock),
        adjustments=ZERO,
        back_charges=ZERO,
        credits=ZERO,
        condemnations=ZERO,
    )


def ensure_reconciliation(db: Session, period: Period, location_id: int) -> tuple[Reconciliation, bool]:
    existing = find_reconciliation(db, period.id, location_id)
    if existing:
        return existing, False

    period_id = period.id
    reconciliation = build_baseline(db, period, location_id)
    db.add(reconciliation)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost the insert race; the rollback also discards anything else staged on the session.
        db.rollback()
        existing = find_reconciliation(db, period_id, location_id)
        if not existing:
            raise ConcurrentCreationConflict(
                "Reconciliation baseline could not be created or re-read",
                details={"period_id": period_id, "location_id": location_id},
            ) from exc
        logger.warning(
            "reconciliation baseline for period=%s location=%s created concurrently, using existing id=%s",
            period_id,
            location_id,
            existing.id,
        )
        return existing, False

    db.refresh(reconciliation)
    logger.info(
        "created reconciliation baseline id=%s period=%s location=%s",
        reconciliation.id,
        period_id,
        location_id,
    )
    return reconciliation, True


def apply_adjustments(reconciliation: Reconciliation, changes: Mapping[str, Decimal | int | str | None]) -> list[str]:
    changed: list[str] = []
    for field in ADJUSTMENT_FIELDS:
        if field not in changes or changes[field] is None:
            continue
        value = round_money(to_decimal(changes[field], field))
        if Decimal(getattr(reconciliation, field)) != value:
            setattr(reconciliation, field, value)
            changed.append(field)
    return changed


def calculate_for(db: Session, reconciliation: Reconciliation) -> ReconciliationCalculation:
    mandays = total_mandays(db, reconciliation.location_id, reconciliation.period_id)
    return calculate_reconciliation(ConsumptionInput.from_reconciliation(reconciliation), mandays)


def upsert_reconciliation(
    db: Session,
    period: Period,
    location_id: int,
    changes: Mapping[str, Decimal | int | str | None],
) -> ReconciliationOutcome:
    reconciliation, created = ensure_reconciliation(db, period, location_id)
    changed = apply_adjustments(reconciliation, changes)
    if changed:
        db.commit()
        db.refresh(reconciliation)
        logger.info("updated reconciliation id=%s fields=%s", reconciliation.id, ",".join(changed))
    return ReconciliationOutcome(
        reconciliation=reconciliation,
        calculation=calculate_for(db, reconciliation),
        created=created,
    )


def load_reconciliation(db: Session, period: Period, location_id: int) -> ReconciliationOutcome:
    reconciliation = find_reconciliation(db, period.id, location_id)
    if reconciliation:
        return ReconciliationOutcome(reconciliation=reconciliation, calculation=calculate_for(db, reconciliation))

    preview = build_baseline(db, period, location_id)
    mandays = total_mandays(db, location_id, period.id)
    return ReconciliationOutcome(
        reconciliation=preview,
        calculation=calculate_reconciliation(ConsumptionInput.from_reconciliation(preview), mandays),
        is_auto_calculated=True,
    )
