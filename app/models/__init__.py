from app.models.inventory import (
    Delivery,
    DeliveryLine,
    Issue,
    IssueLine,
    Item,
    Location,
    LocationStock,
    Supplier,
    Transfer,
    TransferLine,
)
from app.models.period import POB, Period, PeriodLocation, Reconciliation

__all__ = [
    "Delivery",
    "DeliveryLine",
    "Issue",
    "IssueLine",
    "Item",
    "Location",
    "LocationStock",
    "POB",
    "Period",
    "PeriodLocation",
    "Reconciliation",
    "Supplier",
    "Transfer",
    "TransferLine",
]
