from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.inventory import Item, Location
from app.models.period import Period, PeriodLocation, PeriodLocationStatus, PeriodStatus


def get_location_or_404(db: Session, location_id: int) -> Location:
    location = db.get(Location, location_id)
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return location


def get_active_location(db: Session, location_id: int) -> Location:
    location = get_location_or_404(db, location_id)
    if not location.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location is inactive")
    return location


def get_item_or_404(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Item not found: {item_id}")
    return item


def get_period_or_404(db: Session, period_id: int) -> Period:
    period = db.get(Period, period_id)
    if not period:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Period not found")
    return period


def get_open_period(db: Session) -> Period | None:
    return db.scalar(select(Period).where(Period.status == PeriodStatus.OPEN).order_by(Period.start_date.desc()))


def resolve_period(db: Session, period_id: int | None) -> Period:
    """The explicitly requested period, else the single OPEN one."""
    if period_id is not None:
        return get_period_or_404(db, period_id)
    period = get_open_period(db)
    if not period:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "NO_OPEN_PERIOD", "message": "No open period found"},
        )
    return period


def get_period_location(db: Session, period_id: int, location_id: int) -> PeriodLocation | None:
    return db.scalar(
        select(PeriodLocation).where(
            PeriodLocation.period_id == period_id,
            PeriodLocation.location_id == location_id,
        )
    )


def require_open_posting(db: Session, period: Period, location_id: int) -> None:
    """Stock documents may only post into an OPEN period whose location has not been closed."""
    if period.status != PeriodStatus.OPEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "PERIOD_NOT_OPEN", "message": "Period is not open for posting"},
        )
    period_location = get_period_location(db, period.id, location_id)
    if period_location and period_location.status != PeriodLocationStatus.OPEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "PERIOD_LOCATION_NOT_OPEN",
                "message": f"Location is {period_location.status.value} for this period",
            },
        )
