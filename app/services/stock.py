from dataclasses import asdict, dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.inventory import Item, Location, LocationStock
from app.services.errors import InsufficientStock
from app.services.reconciliation import ZERO, round_money, to_decimal
from app.services.wac import calculate_wac


@dataclass(frozen=True)
class StockShortfall:
    item_id: int
    item_code: str
    item_name: str
    unit: str
    requested_quantity: Decimal
    available_quantity: Decimal
    shortfall: Decimal


def get_stock(db: Session, location_id: int, item_id: int, *, for_update: bool = False) -> LocationStock | None:
    query = select(LocationStock).where(
        LocationStock.location_id == location_id,
        LocationStock.item_id == item_id,
    )
    if for_update:
        query = query.with_for_update()
    return db.scalar(query)


def validate_sufficient_stock(db: Session, location: Location, lines: list[tuple[int, Decimal]]) -> None:
    # Split lines for the same item are summed; a missing stock row counts as zero on hand.
    requested: dict[int, Decimal] = {}
    for item_id, quantity in lines:
        requested[item_id] = requested.get(item_id, ZERO) + to_decimal(quantity, "quantity")

    shortfalls: list[StockShortfall] = []
    for item_id, quantity in requested.items():
        stock = get_stock(db, location.id, item_id)
        available = Decimal(stock.on_hand) if stock else ZERO
        if available >= quantity:
            continue
        item = db.get(Item, item_id)
        shortfalls.append(
            StockShortfall(
                item_id=item_id,
                item_code=item.code if item else "UNKNOWN",
                item_name=item.name if item else "Unknown Item",
                unit=item.unit.value if item else "EA",
                requested_quantity=quantity,
                available_quantity=available,
                shortfall=quantity - available,
            )
        )

    if shortfalls:
        raise InsufficientStock(
            f"Insufficient stock at {location.name} for {len(shortfalls)} item(s)",
            details={
                "location_id": location.id,
                "location_name": location.name,
                "insufficient_items": [
                    {key: str(value) if isinstance(value, Decimal) else value for key, value in asdict(item).items()}
                    for item in shortfalls
                ],
            },
        )


def receive_stock(db: Session, location_id: int, item_id: int, quantity: Decimal, unit_price: Decimal) -> LocationStock:
    stock = get_stock(db, location_id, item_id, for_update=True)
    if not stock:
        stock = LocationStock(location_id=location_id, item_id=item_id, on_hand=ZERO, wac=ZERO)
        db.add(stock)
        db.flush()

    result = calculate_wac(stock.on_hand or ZERO, stock.wac or ZERO, quantity, unit_price)
    stock.on_hand = result.new_quantity
    stock.wac = result.new_wac
    return stock


def deduct_stock(db: Session, location_id: int, item_id: int, quantity: Decimal) -> tuple[LocationStock, Decimal]:
    stock = get_stock(db, location_id, item_id, for_update=True)
    if not stock or Decimal(stock.on_hand) < quantity:
        available = Decimal(stock.on_hand) if stock else ZERO
        raise InsufficientStock(
            "Insufficient stock quantity",
            details={"location_id": location_id, "item_id": item_id, "available_quantity": str(available)},
        )
    wac = Decimal(stock.wac)
    stock.on_hand = Decimal(stock.on_hand) - quantity
    return stock, wac


def stock_value(stock: LocationStock) -> Decimal:
    return round_money(Decimal(stock.on_hand) * Decimal(stock.wac))
