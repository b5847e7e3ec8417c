from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.inventory import CostCentre, ItemUnit, LocationType, TransferStatus


class LocationCreate(BaseModel):
    code: str = Field(min_length=2, max_length=10)
    name: str = Field(min_length=2, max_length=100)
    type: LocationType
    address: str | None = None
    timezone: str = Field(default="Asia/Riyadh", max_length=50)


class LocationUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=2, max_length=10)
    name: str | None = Field(default=None, min_length=2, max_length=100)
    type: LocationType | None = None
    address: str | None = None
    is_active: bool | None = None


class LocationOut(BaseModel):
    id: int
    code: str
    name: str
    type: LocationType
    address: str | None
    timezone: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LocationRef(BaseModel):
    id: int
    code: str
    name: str

    model_config = {"from_attributes": True}


class ItemCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=2, max_length=200)
    unit: ItemUnit
    category: str | None = Field(default=None, max_length=50)


class ItemOut(BaseModel):
    id: int
    code: str
    name: str
    unit: ItemUnit
    category: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class SupplierCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=2, max_length=200)
    contact: str | None = Field(default=None, max_length=255)


class SupplierOut(BaseModel):
    id: int
    code: str
    name: str
    contact: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LocationStockOut(BaseModel):
    item_id: int
    item_code: str
    item_name: str
    unit: ItemUnit
    on_hand: Decimal
    wac: Decimal
    value: Decimal
    updated_at: datetime


class LocationStockReportOut(BaseModel):
    location: LocationRef
    items: list[LocationStockOut]
    total_value: Decimal


class DeliveryLineCreate(BaseModel):
    item_id: int
    quantity: Decimal = Field(gt=0, max_digits=15, decimal_places=4)
    unit_price: Decimal = Field(ge=0, max_digits=15, decimal_places=4)


class DeliveryCreate(BaseModel):
    supplier_id: int
    period_id: int | None = None
    delivery_date: date
    invoice_no: str | None = Field(default=None, max_length=100)
    delivery_note: str | None = None
    lines: list[DeliveryLineCreate] = Field(min_length=1)


class DeliveryLineOut(BaseModel):
    id: int
    item_id: int
    quantity: Decimal
    unit_price: Decimal
    line_value: Decimal

    model_config = {"from_attributes": True}


class DeliveryOut(BaseModel):
    id: int
    delivery_no: str
    period_id: int
    location_id: int
    supplier_id: int
    invoice_no: str | None
    delivery_note: str | None
    delivery_date: date
    total_amount: Decimal
    posted_at: datetime
    lines: list[DeliveryLineOut]

    model_config = {"from_attributes": True}


class IssueLineCreate(BaseModel):
    item_id: int
    quantity: Decimal = Field(gt=0, max_digits=15, decimal_places=4)


class IssueCreate(BaseModel):
    period_id: int | None = None
    issue_date: date
    cost_centre: CostCentre = CostCentre.FOOD
    notes: str | None = None
    lines: list[IssueLineCreate] = Field(min_length=1)


class IssueLineOut(BaseModel):
    id: int
    item_id: int
    quantity: Decimal
    wac_at_issue: Decimal
    line_value: Decimal

    model_config = {"from_attributes": True}


class IssueOut(BaseModel):
    id: int
    issue_no: str
    period_id: int
    location_id: int
    issue_date: date
    cost_centre: CostCentre
    total_value: Decimal
    notes: str | None
    posted_at: datetime
    lines: list[IssueLineOut]

    model_config = {"from_attributes": True}


class TransferLineCreate(BaseModel):
    item_id: int
    quantity: Decimal = Field(gt=0, max_digits=15, decimal_places=4)


class TransferCreate(BaseModel):
    from_location_id: int
    to_location_id: int
    request_date: date | None = None
    notes: str | None = None
    lines: list[TransferLineCreate] = Field(min_length=1)


class TransferLineOut(BaseModel):
    id: int
    item_id: int
    quantity: Decimal
    wac_at_transfer: Decimal
    line_value: Decimal

    model_config = {"from_attributes": True}


class TransferOut(BaseModel):
    id: int
    transfer_no: str
    from_location_id: int
    to_location_id: int
    status: TransferStatus
    request_date: date
    approval_date: date | None
    transfer_date: date | None
    total_value: Decimal
    notes: str | None
    created_at: datetime
    lines: list[TransferLineOut]

    model_config = {"from_attributes": True}


class TransferDecision(BaseModel):
    decision_date: date | None = None
    notes: str | None = None


class POBEntryIn(BaseModel):
    entry_date: date
    crew_count: int = Field(default=0, ge=0)
    extra_count: int = Field(default=0, ge=0)


class POBUpsertRequest(BaseModel):
    period_id: int | None = None
    entries: list[POBEntryIn] = Field(min_length=1)


class POBUpdate(BaseModel):
    crew_count: int | None = Field(default=None, ge=0)
    extra_count: int | None = Field(default=None, ge=0)


class POBEntryOut(BaseModel):
    id: int
    period_id: int
    location_id: int
    entry_date: date
    crew_count: int
    extra_count: int
    total_count: int
    entered_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class POBSummaryOut(BaseModel):
    total_crew_count: int
    total_extra_count: int
    total_mandays: int
    entries_count: int


class POBListOut(BaseModel):
    location: LocationRef
    period_id: int
    entries: list[POBEntryOut]
    summary: POBSummaryOut
