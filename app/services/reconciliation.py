from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from app.services.errors import InvalidArgument

ZERO = Decimal("0")
MONEY_QUANTUM = Decimal("0.01")


def to_decimal(value: Decimal | int | str | float | None, field: str = "value") -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() keeps floats at their shortest repr instead of the binary expansion.
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise InvalidArgument(f"Invalid {field}: must be a number") from exc
    if not result.is_finite():
        raise InvalidArgument(f"Invalid {field}: must be a finite number")
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ConsumptionInput:
    opening_stock: Decimal
    receipts: Decimal
    transfers_in: Decimal
    transfers_out: Decimal
    issues: Decimal
    closing_stock: Decimal
    adjustments: Decimal = ZERO
    back_charges: Decimal = ZERO
    credits: Decimal = ZERO
    condemnations: Decimal = ZERO

    @classmethod
    def from_values(cls, **values) -> "ConsumptionInput":
        return cls(**{name: to_decimal(value, name) for name, value in values.items()})

    @classmethod
    def from_reconciliation(cls, reconciliation) -> "ConsumptionInput":
        return cls.from_values(
            opening_stock=reconciliation.opening_stock,
            receipts=reconciliation.receipts,
            transfers_in=reconciliation.transfers_in,
            transfers_out=reconciliation.transfers_out,
            issues=reconciliation.issues,
            closing_stock=reconciliation.closing_stock,
            adjustments=reconciliation.adjustments,
            back_charges=reconciliation.back_charges,
            credits=reconciliation.credits,
            condemnations=reconciliation.condemnations,
        )


@dataclass(frozen=True)
class ConsumptionResult:
    consumption: Decimal
    total_adjustments: Decimal
    breakdown: ConsumptionInput


@dataclass(frozen=True)
class MandayCostResult:
    manday_cost: Decimal
    consumption: Decimal
    total_mandays: int


@dataclass(frozen=True)
class ReconciliationCalculation:
    consumption: ConsumptionResult
    total_mandays: int
    manday_cost: MandayCostResult | None


def calculate_consumption(inputs: ConsumptionInput) -> ConsumptionResult:
    # Exact; a negative consumption is reported, not rejected.
    total_adjustments = inputs.back_charges + inputs.credits + inputs.condemnations + inputs.adjustments
    consumption = (
        inputs.opening_stock
        + inputs.receipts
        + inputs.transfers_in
        - inputs.transfers_out
        - inputs.issues
        - inputs.closing_stock
        + total_adjustments
    )
    return ConsumptionResult(
        consumption=consumption,
        total_adjustments=total_adjustments,
        breakdown=inputs,
    )


def calculate_manday_cost(consumption: Decimal | int | str, total_mandays: int) -> MandayCostResult:
    if isinstance(total_mandays, bool) or not isinstance(total_mandays, int):
        raise InvalidArgument("Invalid totalMandays: must be an integer")
    if total_mandays <= 0:
        raise InvalidArgument("Invalid totalMandays: must be greater than zero")
    consumption_value = to_decimal(consumption, "consumption")
    return MandayCostResult(
        manday_cost=round_money(consumption_value / Decimal(total_mandays)),
        consumption=consumption_value,
        total_mandays=total_mandays,
    )


def calculate_reconciliation(inputs: ConsumptionInput, total_mandays: int) -> ReconciliationCalculation:
    consumption = calculate_consumption(inputs)
    manday_cost = None
    if total_mandays > 0:
        manday_cost = calculate_manday_cost(consumption.consumption, total_mandays)
    return ReconciliationCalculation(
        consumption=consumption,
        total_mandays=total_mandays,
        manday_cost=manday_cost,
    )
