import calendar
import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_location_or_404, get_open_period, get_period_location, get_period_or_404
from app.db.database import get_db
from app.models.inventory import Location
from app.models.period import Period, PeriodLocation, PeriodLocationStatus, PeriodStatus
from app.schemas.inventory import LocationRef
from app.schemas.period import (
    NotReadyLocationOut,
    PeriodCreate,
    PeriodDetailOut,
    PeriodLocationDetailOut,
    PeriodLocationOut,
    PeriodOut,
    PeriodRollForward,
)
from app.services.reconciliation_store import find_reconciliation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/periods", tags=["Periods"])


def _period_locations(db: Session, period_id: int) -> list[tuple[PeriodLocation, Location]]:
    return list(
        db.execute(
            select(PeriodLocation, Location)
            .join(Location, Location.id == PeriodLocation.location_id)
            .where(PeriodLocation.period_id == period_id)
            .order_by(Location.code.asc())
        ).all()
    )


def _period_detail(db: Session, period: Period) -> PeriodDetailOut:
    locations = [
        PeriodLocationDetailOut(
            **PeriodLocationOut.model_validate(period_location).model_dump(),
            location=LocationRef.model_validate(location),
        )
        for period_location, location in _period_locations(db, period.id)
    ]
    return PeriodDetailOut(**PeriodOut.model_validate(period).model_dump(), locations=locations)


def _get_period_location_or_404(db: Session, period_id: int, location_id: int) -> PeriodLocation:
    period_location = get_period_location(db, period_id, location_id)
    if not period_location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location is not part of this period")
    return period_location


@router.post("", response_model=PeriodDetailOut, status_code=status.HTTP_201_CREATED)
def create_period(payload: PeriodCreate, db: Session = Depends(get_db)):
    overlapping = db.scalar(
        select(Period).where(Period.start_date <= payload.end_date, Period.end_date >= payload.start_date)
    )
    if overlapping:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Period dates overlap existing period {overlapping.name}",
        )

    period = Period(
        name=payload.name.strip(),
        start_date=payload.start_date,
        end_date=payload.end_date,
        status=PeriodStatus.DRAFT,
    )
    db.add(period)
    db.flush()
    for location in db.scalars(select(Location).where(Location.is_active.is_(True))):
        db.add(PeriodLocation(period_id=period.id, location_id=location.id, status=PeriodLocationStatus.OPEN))
    db.commit()
    db.refresh(period)
    return _period_detail(db, period)


@router.get("", response_model=list[PeriodOut])
def list_periods(
    status_filter: PeriodStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
):
    query = select(Period).order_by(Period.start_date.desc())
    if status_filter is not None:
        query = query.where(Period.status == status_filter)
    return list(db.scalars(query).all())


@router.get("/current", response_model=PeriodDetailOut)
def current_period(db: Session = Depends(get_db)):
    period = get_open_period(db)
    if not period:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No open period found")
    return _period_detail(db, period)


@router.get("/{period_id}", response_model=PeriodDetailOut)
def get_period(period_id: int, db: Session = Depends(get_db)):
    return _period_detail(db, get_period_or_404(db, period_id))


@router.post("/{period_id}/open", response_model=PeriodOut)
def open_period(period_id: int, db: Session = Depends(get_db)):
    period = get_period_or_404(db, period_id)
    if period.status != PeriodStatus.DRAFT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only DRAFT periods can be opened, period is {period.status.value}",
        )
    already_open = get_open_period(db)
    if already_open:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Period {already_open.name} is already open",
        )

    period.status = PeriodStatus.OPEN
    db.commit()
    db.refresh(period)
    logger.info("period %s (%s) opened", period.id, period.name)
    return period


@router.patch("/{period_id}/locations/{location_id}/ready", response_model=PeriodLocationOut)
def mark_location_ready(period_id: int, location_id: int, db: Session = Depends(get_db)):
    period = get_period_or_404(db, period_id)
    get_location_or_404(db, location_id)
    period_location = _get_period_location_or_404(db, period.id, location_id)
    if period_location.status == PeriodLocationStatus.CLOSED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location is already closed for this period")
    if not find_reconciliation(db, period.id, location_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "RECONCILIATION_NOT_COMPLETED",
                "message": "Save the reconciliation for this location before marking it ready",
            },
        )

    period_location.status = PeriodLocationStatus.READY
    period_location.ready_at = datetime.utcnow()
    db.commit()
    db.refresh(period_location)
    return period_location


@router.patch("/{period_id}/locations/{location_id}/unready", response_model=PeriodLocationOut)
def mark_location_unready(period_id: int, location_id: int, db: Session = Depends(get_db)):
    period = get_period_or_404(db, period_id)
    period_location = _get_period_location_or_404(db, period.id, location_id)
    if period_location.status != PeriodLocationStatus.READY:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Location is {period_location.status.value}, only READY locations can be reopened",
        )

    period_location.status = PeriodLocationStatus.OPEN
    period_location.ready_at = None
    db.commit()
    db.refresh(period_location)
    return period_location


@router.post("/{period_id}/close", response_model=PeriodDetailOut)
def close_period(period_id: int, db: Session = Depends(get_db)):
    period = get_period_or_404(db, period_id)
    if period.status != PeriodStatus.OPEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only OPEN periods can be closed, period is {period.status.value}",
        )

    rows = _period_locations(db, period.id)
    if not rows:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Period has no locations to close")
    not_ready = [
        NotReadyLocationOut(
            location_id=location.id,
            location_code=location.code,
            location_name=location.name,
            status=period_location.status,
        ).model_dump(mode="json")
        for period_location, location in rows
        if period_location.status != PeriodLocationStatus.READY
    ]
    if not_ready:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "LOCATIONS_NOT_READY",
                "message": f"{len(not_ready)} location(s) are not ready",
                "locations": not_ready,
            },
        )

    closed_at = datetime.utcnow()
    for period_location, location in rows:
        reconciliation = find_reconciliation(db, period.id, location.id)
        # Values stay null for a location without a saved reconciliation.
        if reconciliation:
            period_location.opening_value = reconciliation.opening_stock
            period_location.closing_value = reconciliation.closing_stock
        period_location.status = PeriodLocationStatus.CLOSED
        period_location.closed_at = closed_at
    period.status = PeriodStatus.CLOSED
    period.closed_at = closed_at
    db.commit()
    db.refresh(period)
    logger.info("period %s (%s) closed with %s location(s)", period.id, period.name, len(rows))
    return _period_detail(db, period)


@router.post("/{period_id}/roll-forward", response_model=PeriodDetailOut, status_code=status.HTTP_201_CREATED)
def roll_forward_period(
    period_id: int,
    payload: PeriodRollForward | None = None,
    db: Session = Depends(get_db),
):
    source = get_period_or_404(db, period_id)
    if source.status != PeriodStatus.CLOSED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "PERIOD_NOT_CLOSED",
                "message": f"Only CLOSED periods can be rolled forward, period is {source.status.value}",
            },
        )

    payload = payload or PeriodRollForward()
    start_date = source.end_date + timedelta(days=1)
    end_date = payload.end_date or start_date.replace(
        day=calendar.monthrange(start_date.year, start_date.month)[1]
    )
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_DATE_RANGE", "message": "end_date must not be before the new start date"},
        )
    overlapping = db.scalar(select(Period).where(Period.start_date <= end_date, Period.end_date >= start_date))
    if overlapping:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "code": "OVERLAPPING_PERIOD",
                "message": f"New period would overlap existing period {overlapping.name}",
            },
        )

    closing_values = {
        period_location.location_id: period_location.closing_value
        for period_location, _ in _period_locations(db, source.id)
    }
    period = Period(
        name=payload.name.strip() if payload.name else f"{calendar.month_name[start_date.month]} {start_date.year}",
        start_date=start_date,
        end_date=end_date,
        status=PeriodStatus.DRAFT,
    )
    db.add(period)
    db.flush()
    for location in db.scalars(select(Location).where(Location.is_active.is_(True))):
        db.add(
            PeriodLocation(
                period_id=period.id,
                location_id=location.id,
                status=PeriodLocationStatus.OPEN,
                opening_value=closing_values.get(location.id),
            )
        )
    db.commit()
    db.refresh(period)
    logger.info("period %s (%s) rolled forward into %s (%s)", source.id, source.name, period.id, period.name)
    return _period_detail(db, period)
