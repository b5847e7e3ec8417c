from datetime import date
from decimal import Decimal

import pytest

from app.models.inventory import (
    Delivery,
    DeliveryLine,
    Issue,
    IssueLine,
    Transfer,
    TransferLine,
    TransferStatus,
)
from app.models.period import POB, PeriodStatus, Reconciliation
from app.services.aggregation import aggregate_movements, opening_stock_value, total_mandays
from app.services.errors import DataUnavailable
from tests.conftest import make_item, make_location, make_period, make_supplier, set_stock


def _delivery(db, number, period, location, supplier, item, values):
    delivery = Delivery(
        delivery_no=number,
        period_id=period.id,
        location_id=location.id,
        supplier_id=supplier.id,
        delivery_date=period.start_date,
    )
    for value in values:
        delivery.lines.append(
            DeliveryLine(item_id=item.id, quantity=Decimal("1"), unit_price=Decimal(value), line_value=Decimal(value))
        )
    db.add(delivery)
    db.commit()


def _issue(db, number, period, location, item, values):
    issue = Issue(issue_no=number, period_id=period.id, location_id=location.id, issue_date=period.start_date)
    for value in values:
        issue.lines.append(
            IssueLine(item_id=item.id, quantity=Decimal("1"), wac_at_issue=Decimal(value), line_value=Decimal(value))
        )
    db.add(issue)
    db.commit()


def _transfer(db, number, source, destination, item, value, transfer_status, transfer_date):
    transfer = Transfer(
        transfer_no=number,
        from_location_id=source.id,
        to_location_id=destination.id,
        status=transfer_status,
        request_date=date(2025, 1, 1),
        transfer_date=transfer_date,
        total_value=Decimal(value),
    )
    transfer.lines.append(
        TransferLine(item_id=item.id, quantity=Decimal("1"), wac_at_transfer=Decimal(value), line_value=Decimal(value))
    )
    db.add(transfer)
    db.commit()


def test_opening_stock_defaults_to_zero_without_prior_period(db):
    location = make_location(db)
    period = make_period(db)

    assert opening_stock_value(db, location.id, period) == Decimal("0")


def test_opening_stock_reads_nearest_prior_reconciliation(db):
    location = make_location(db)
    november = make_period(db, "November 2024", date(2024, 11, 1), date(2024, 11, 30), PeriodStatus.CLOSED)
    december = make_period(db, "December 2024", date(2024, 12, 1), date(2024, 12, 31), PeriodStatus.CLOSED)
    january = make_period(db)
    db.add(Reconciliation(period_id=november.id, location_id=location.id, closing_stock=Decimal("100.00")))
    db.add(Reconciliation(period_id=december.id, location_id=location.id, closing_stock=Decimal("750.25")))
    db.commit()

    assert opening_stock_value(db, location.id, january) == Decimal("750.25")


def test_opening_stock_is_zero_when_nearest_prior_period_has_no_reconciliation(db):
    location = make_location(db)
    november = make_period(db, "November 2024", date(2024, 11, 1), date(2024, 11, 30), PeriodStatus.CLOSED)
    make_period(db, "December 2024", date(2024, 12, 1), date(2024, 12, 31), PeriodStatus.CLOSED)
    january = make_period(db)
    db.add(Reconciliation(period_id=november.id, location_id=location.id, closing_stock=Decimal("100.00")))
    db.commit()

    assert opening_stock_value(db, location.id, january) == Decimal("0")


def test_aggregate_movements_sums_each_movement_kind(db):
    kitchen = make_location(db)
    store = make_location(db, code="STR1", name="Dry Store")
    supplier = make_supplier(db)
    rice = make_item(db)
    period = make_period(db)
    other_period = make_period(db, "February 2025", date(2025, 2, 1), date(2025, 2, 28), PeriodStatus.DRAFT)

    _delivery(db, "DLV-2025-001", period, kitchen, supplier, rice, ["100.10", "200.20"])
    _delivery(db, "DLV-2025-002", other_period, kitchen, supplier, rice, ["999.00"])
    _delivery(db, "DLV-2025-003", period, store, supplier, rice, ["50.00"])
    _issue(db, "ISS-2025-001", period, kitchen, rice, ["30.15", "19.85"])
    _transfer(db, "TRF-2025-001", store, kitchen, rice, "40.00", TransferStatus.COMPLETED, date(2025, 1, 15))
    _transfer(db, "TRF-2025-002", kitchen, store, rice, "15.50", TransferStatus.COMPLETED, date(2025, 1, 31))
    _transfer(db, "TRF-2025-003", store, kitchen, rice, "70.00", TransferStatus.PENDING_APPROVAL, None)
    _transfer(db, "TRF-2025-004", store, kitchen, rice, "80.00", TransferStatus.COMPLETED, date(2025, 2, 1))
    set_stock(db, kitchen, rice, "12.5", "10.333")

    totals = aggregate_movements(db, kitchen.id, period.id)

    assert totals.opening_stock == Decimal("0")
    assert totals.receipts == Decimal("300.30")
    assert totals.issues == Decimal("50.00")
    assert totals.transfers_in == Decimal("40.00")
    assert totals.transfers_out == Decimal("15.50")
    # 12.5 x 10.333 = 129.1625
    assert totals.closing_stock == Decimal("129.16")


def test_aggregate_movements_honours_explicit_window(db):
    kitchen = make_location(db)
    store = make_location(db, code="STR1", name="Dry Store")
    rice = make_item(db)
    period = make_period(db)
    _transfer(db, "TRF-2025-001", store, kitchen, rice, "40.00", TransferStatus.COMPLETED, date(2025, 1, 15))

    totals = aggregate_movements(db, kitchen.id, period.id, date(2025, 1, 16), date(2025, 1, 31))

    assert totals.transfers_in == Decimal("0")


def test_aggregate_movements_requires_existing_location_and_period(db):
    location = make_location(db)
    period = make_period(db)

    with pytest.raises(DataUnavailable):
        aggregate_movements(db, location.id + 100, period.id)
    with pytest.raises(DataUnavailable):
        aggregate_movements(db, location.id, period.id + 100)


def test_total_mandays_sums_crew_and_extra(db):
    location = make_location(db)
    period = make_period(db)
    db.add(POB(period_id=period.id, location_id=location.id, entry_date=date(2025, 1, 1), crew_count=10, extra_count=2))
    db.add(POB(period_id=period.id, location_id=location.id, entry_date=date(2025, 1, 2), crew_count=11, extra_count=0))
    db.commit()

    assert total_mandays(db, location.id, period.id) == 23
    assert total_mandays(db, location.id, period.id + 1) == 0
