from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.inventory import LocationRef
from app.schemas.period import PeriodRef


class ReconciliationAdjustments(BaseModel):
    back_charges: Decimal | None = Field(default=None, max_digits=15, decimal_places=2)
    credits: Decimal | None = Field(default=None, max_digits=15, decimal_places=2)
    condemnations: Decimal | None = Field(default=None, max_digits=15, decimal_places=2)
    adjustments: Decimal | None = Field(default=None, max_digits=15, decimal_places=2)

    def changes(self) -> dict[str, Decimal]:
        return {field: value for field, value in self.model_dump(exclude_unset=True).items() if value is not None}


class ReconciliationCreate(ReconciliationAdjustments):
    period_id: int
    location_id: int

    def changes(self) -> dict[str, Decimal]:
        values = super().changes()
        values.pop("period_id", None)
        values.pop("location_id", None)
        return values


class ReconciliationOut(BaseModel):
    id: int | None
    period_id: int
    location_id: int
    opening_stock: Decimal
    receipts: Decimal
    transfers_in: Decimal
    transfers_out: Decimal
    issues: Decimal
    closing_stock: Decimal
    adjustments: Decimal
    back_charges: Decimal
    credits: Decimal
    condemnations: Decimal
    last_updated: datetime | None

    model_config = {"from_attributes": True}


class ConsumptionBreakdownOut(BaseModel):
    opening_stock: Decimal
    receipts: Decimal
    transfers_in: Decimal
    transfers_out: Decimal
    issues: Decimal
    closing_stock: Decimal
    adjustments: Decimal
    back_charges: Decimal
    credits: Decimal
    condemnations: Decimal

    model_config = {"from_attributes": True}


class CalculationsOut(BaseModel):
    consumption: Decimal
    total_adjustments: Decimal
    total_mandays: int
    manday_cost: Decimal | None
    breakdown: ConsumptionBreakdownOut


class ReconciliationDetailOut(BaseModel):
    reconciliation: ReconciliationOut
    location: LocationRef
    period: PeriodRef
    calculations: CalculationsOut
    currency: str
    is_auto_calculated: bool


class ConsolidatedLocationOut(BaseModel):
    location: LocationRef
    reconciliation: ReconciliationOut
    calculations: CalculationsOut
    is_auto_calculated: bool


class GrandTotalsOut(BaseModel):
    opening_stock: Decimal
    receipts: Decimal
    transfers_in: Decimal
    transfers_out: Decimal
    issues: Decimal
    closing_stock: Decimal
    adjustments: Decimal
    back_charges: Decimal
    credits: Decimal
    condemnations: Decimal
    consumption: Decimal
    total_mandays: int
    average_manday_cost: Decimal | None


class ConsolidatedSummaryOut(BaseModel):
    total_locations: int
    locations_with_saved_reconciliations: int
    locations_with_auto_calculated: int


class ConsolidatedReconciliationOut(BaseModel):
    period: PeriodRef
    currency: str
    locations: list[ConsolidatedLocationOut]
    grand_totals: GrandTotalsOut
    summary: ConsolidatedSummaryOut
