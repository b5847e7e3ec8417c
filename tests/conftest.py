import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CURRENCY_CODE"] = "SAR"

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.db.database import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.inventory import Item, ItemUnit, Location, LocationStock, LocationType, Supplier  # noqa: E402
from app.models.period import Period, PeriodLocation, PeriodStatus  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_location(db, code="KIT1", name="Main Kitchen", location_type=LocationType.KITCHEN) -> Location:
    location = Location(code=code, name=name, type=location_type)
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


def make_item(db, code="RICE", name="Basmati Rice", unit=ItemUnit.KG) -> Item:
    item = Item(code=code, name=name, unit=unit)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def make_supplier(db, code="SUP1", name="Gulf Foods") -> Supplier:
    supplier = Supplier(code=code, name=name)
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


def make_period(
    db,
    name="January 2025",
    start=date(2025, 1, 1),
    end=date(2025, 1, 31),
    period_status=PeriodStatus.OPEN,
    locations=(),
) -> Period:
    period = Period(name=name, start_date=start, end_date=end, status=period_status)
    db.add(period)
    db.flush()
    for location in locations:
        db.add(PeriodLocation(period_id=period.id, location_id=location.id))
    db.commit()
    db.refresh(period)
    return period


def set_stock(db, location, item, on_hand, wac) -> LocationStock:
    stock = LocationStock(
        location_id=location.id,
        item_id=item.id,
        on_hand=Decimal(str(on_hand)),
        wac=Decimal(str(wac)),
    )
    db.add(stock)
    db.commit()
    db.refresh(stock)
    return stock
