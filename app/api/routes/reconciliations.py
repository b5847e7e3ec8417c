from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_location_or_404, get_period_or_404, resolve_period
from app.core.config import settings
from app.db.database import get_db
from app.models.inventory import Location
from app.models.period import Period, PeriodStatus
from app.schemas.inventory import LocationRef
from app.schemas.period import PeriodRef
from app.schemas.reconciliation import (
    CalculationsOut,
    ConsolidatedLocationOut,
    ConsolidatedReconciliationOut,
    ConsolidatedSummaryOut,
    ConsumptionBreakdownOut,
    GrandTotalsOut,
    ReconciliationAdjustments,
    ReconciliationCreate,
    ReconciliationDetailOut,
    ReconciliationOut,
)
from app.services.reconciliation import ZERO, ReconciliationCalculation, calculate_manday_cost
from app.services.reconciliation_store import ReconciliationOutcome, load_reconciliation, upsert_reconciliation

router = APIRouter(tags=["Reconciliations"])

MONETARY_COLUMNS = (
    "opening_stock",
    "receipts",
    "transfers_in",
    "transfers_out",
    "issues",
    "closing_stock",
    "adjustments",
    "back_charges",
    "credits",
    "condemnations",
)


def _calculations_out(calculation: ReconciliationCalculation) -> CalculationsOut:
    return CalculationsOut(
        consumption=calculation.consumption.consumption,
        total_adjustments=calculation.consumption.total_adjustments,
        total_mandays=calculation.total_mandays,
        manday_cost=calculation.manday_cost.manday_cost if calculation.manday_cost else None,
        breakdown=ConsumptionBreakdownOut.model_validate(calculation.consumption.breakdown),
    )


def _detail_out(outcome: ReconciliationOutcome, location: Location, period: Period) -> ReconciliationDetailOut:
    return ReconciliationDetailOut(
        reconciliation=ReconciliationOut.model_validate(outcome.reconciliation),
        location=LocationRef.model_validate(location),
        period=PeriodRef.model_validate(period),
        calculations=_calculations_out(outcome.calculation),
        currency=settings.currency_code,
        is_auto_calculated=outcome.is_auto_calculated,
    )


@router.get(
    "/locations/{location_id}/reconciliations/{period_id}",
    response_model=ReconciliationDetailOut,
)
def get_reconciliation(location_id: int, period_id: int, db: Session = Depends(get_db)):
    location = get_location_or_404(db, location_id)
    period = get_period_or_404(db, period_id)
    return _detail_out(load_reconciliation(db, period, location.id), location, period)


@router.patch(
    "/locations/{location_id}/reconciliations/{period_id}",
    response_model=ReconciliationDetailOut,
)
def save_reconciliation(
    location_id: int,
    period_id: int,
    payload: ReconciliationAdjustments,
    db: Session = Depends(get_db),
):
    location = get_location_or_404(db, location_id)
    period = get_period_or_404(db, period_id)
    if period.status == PeriodStatus.CLOSED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "PERIOD_CLOSED", "message": "Cannot update reconciliation for a closed period"},
        )
    outcome = upsert_reconciliation(db, period, location.id, payload.changes())
    return _detail_out(outcome, location, period)


@router.post("/reconciliations", response_model=ReconciliationDetailOut)
def create_reconciliation(payload: ReconciliationCreate, response: Response, db: Session = Depends(get_db)):
    location = get_location_or_404(db, payload.location_id)
    period = get_period_or_404(db, payload.period_id)
    if period.status != PeriodStatus.OPEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "PERIOD_NOT_OPEN", "message": "Reconciliations can only be saved for an open period"},
        )
    outcome = upsert_reconciliation(db, period, location.id, payload.changes())
    if outcome.created:
        response.status_code = status.HTTP_201_CREATED
    return _detail_out(outcome, location, period)


@router.get("/reconciliations/consolidated", response_model=ConsolidatedReconciliationOut)
def consolidated_reconciliation(period_id: int | None = None, db: Session = Depends(get_db)):
    period = resolve_period(db, period_id)
    locations = list(db.scalars(select(Location).where(Location.is_active.is_(True)).order_by(Location.code.asc())))

    entries: list[ConsolidatedLocationOut] = []
    totals = {column: ZERO for column in MONETARY_COLUMNS}
    grand_consumption = ZERO
    grand_mandays = 0
    for location in locations:
        outcome = load_reconciliation(db, period, location.id)
        for column in MONETARY_COLUMNS:
            totals[column] += getattr(outcome.calculation.consumption.breakdown, column)
        grand_consumption += outcome.calculation.consumption.consumption
        grand_mandays += outcome.calculation.total_mandays
        entries.append(
            ConsolidatedLocationOut(
                location=LocationRef.model_validate(location),
                reconciliation=ReconciliationOut.model_validate(outcome.reconciliation),
                calculations=_calculations_out(outcome.calculation),
                is_auto_calculated=outcome.is_auto_calculated,
            )
        )

    average = calculate_manday_cost(grand_consumption, grand_mandays).manday_cost if grand_mandays > 0 else None
    saved = sum(1 for entry in entries if not entry.is_auto_calculated)
    return ConsolidatedReconciliationOut(
        period=PeriodRef.model_validate(period),
        currency=settings.currency_code,
        locations=entries,
        grand_totals=GrandTotalsOut(
            **totals,
            consumption=grand_consumption,
            total_mandays=grand_mandays,
            average_manday_cost=average,
        ),
        summary=ConsolidatedSummaryOut(
            total_locations=len(entries),
            locations_with_saved_reconciliations=saved,
            locations_with_auto_calculated=len(entries) - saved,
        ),
    )
