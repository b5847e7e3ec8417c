from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.services.errors import InvalidArgument
from app.services.reconciliation import ZERO, round_money, to_decimal

WAC_QUANTUM = Decimal("0.0001")


def round_wac(value: Decimal) -> Decimal:
    return value.quantize(WAC_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class WACResult:
    new_wac: Decimal
    new_quantity: Decimal
    new_value: Decimal
    current_value: Decimal
    receipt_value: Decimal


def calculate_wac(current_qty, current_wac, received_qty, receipt_price) -> WACResult:
    current_qty = to_decimal(current_qty, "currentQty")
    current_wac = to_decimal(current_wac, "currentWAC")
    received_qty = to_decimal(received_qty, "receivedQty")
    receipt_price = to_decimal(receipt_price, "receiptPrice")

    if current_qty < 0:
        raise InvalidArgument("Invalid currentQty: cannot be negative")
    if current_wac < 0:
        raise InvalidArgument("Invalid currentWAC: cannot be negative")
    if received_qty <= 0:
        raise InvalidArgument("Invalid receivedQty: must be greater than zero")
    if receipt_price < 0:
        raise InvalidArgument("Invalid receiptPrice: cannot be negative")

    current_value = current_qty * current_wac
    receipt_value = received_qty * receipt_price
    new_quantity = current_qty + received_qty
    new_wac = (current_value + receipt_value) / new_quantity if new_quantity > 0 else ZERO

    return WACResult(
        new_wac=round_wac(new_wac),
        new_quantity=round_wac(new_quantity),
        new_value=round_money(new_quantity * new_wac),
        current_value=round_money(current_value),
        receipt_value=round_money(receipt_value),
    )
