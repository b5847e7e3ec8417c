from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from app.models.period import PeriodLocationStatus, PeriodStatus
from app.schemas.inventory import LocationRef


class PeriodCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PeriodOut(BaseModel):
    id: int
    name: str
    start_date: date
    end_date: date
    status: PeriodStatus
    created_at: datetime
    closed_at: datetime | None

    model_config = {"from_attributes": True}


class PeriodRef(BaseModel):
    id: int
    name: str
    start_date: date
    end_date: date
    status: PeriodStatus

    model_config = {"from_attributes": True}


class PeriodLocationOut(BaseModel):
    period_id: int
    location_id: int
    status: PeriodLocationStatus
    opening_value: Decimal | None
    closing_value: Decimal | None
    ready_at: datetime | None
    closed_at: datetime | None

    model_config = {"from_attributes": True}


class PeriodLocationDetailOut(PeriodLocationOut):
    location: LocationRef


class PeriodDetailOut(PeriodOut):
    locations: list[PeriodLocationDetailOut]


class NotReadyLocationOut(BaseModel):
    location_id: int
    location_code: str
    location_name: str
    status: PeriodLocationStatus


class PeriodRollForward(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    end_date: date | None = None
