import logging
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import (
    get_active_location,
    get_item_or_404,
    get_location_or_404,
    get_period_or_404,
    require_open_posting,
    resolve_period,
)
from app.db.database import get_db
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
    TransferStatus,
)
from app.models.period import POB, Period, PeriodLocation, PeriodStatus
from app.schemas.inventory import (
    DeliveryCreate,
    DeliveryOut,
    IssueCreate,
    IssueOut,
    ItemCreate,
    ItemOut,
    LocationCreate,
    LocationOut,
    LocationRef,
    LocationStockOut,
    LocationStockReportOut,
    LocationUpdate,
    POBEntryOut,
    POBListOut,
    POBSummaryOut,
    POBUpdate,
    POBUpsertRequest,
    SupplierCreate,
    SupplierOut,
    TransferCreate,
    TransferDecision,
    TransferOut,
)
from app.services.numbering import DELIVERY_PREFIX, ISSUE_PREFIX, TRANSFER_PREFIX, next_document_number
from app.services.reconciliation import ZERO, round_money
from app.services.stock import deduct_stock, get_stock, receive_stock, stock_value, validate_sufficient_stock

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Inventory"])


@router.post("/locations", response_model=LocationOut, status_code=status.HTTP_201_CREATED)
def create_location(payload: LocationCreate, db: Session = Depends(get_db)):
    location = Location(
        code=payload.code.strip().upper(),
        name=payload.name.strip(),
        type=payload.type,
        address=payload.address.strip() if payload.address else None,
        timezone=payload.timezone,
    )
    db.add(location)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Location code already exists") from exc

    # A location opened mid-period still has to be reconciled and readied before close.
    for period in db.scalars(select(Period).where(Period.status != PeriodStatus.CLOSED)):
        db.add(PeriodLocation(period_id=period.id, location_id=location.id))
    db.commit()
    db.refresh(location)
    return location


@router.get("/locations", response_model=list[LocationOut])
def list_locations(include_inactive: bool = False, db: Session = Depends(get_db)):
    query = select(Location).order_by(Location.code.asc())
    if not include_inactive:
        query = query.where(Location.is_active.is_(True))
    return list(db.scalars(query).all())


@router.get("/locations/{location_id}", response_model=LocationOut)
def get_location(location_id: int, db: Session = Depends(get_db)):
    return get_location_or_404(db, location_id)


@router.patch("/locations/{location_id}", response_model=LocationOut)
def update_location(location_id: int, payload: LocationUpdate, db: Session = Depends(get_db)):
    location = get_location_or_404(db, location_id)

    if payload.code is not None:
        location.code = payload.code.strip().upper()
    if payload.name is not None:
        location.name = payload.name.strip()
    if payload.type is not None:
        location.type = payload.type
    if payload.address is not None:
        location.address = payload.address.strip() or None
    if payload.is_active is not None:
        location.is_active = payload.is_active
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Location code already exists") from exc
    db.refresh(location)
    return location


@router.post("/items", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
def create_item(payload: ItemCreate, db: Session = Depends(get_db)):
    item = Item(
        code=payload.code.strip().upper(),
        name=payload.name.strip(),
        unit=payload.unit,
        category=payload.category.strip() if payload.category else None,
    )
    db.add(item)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Item code already exists") from exc
    db.refresh(item)
    return item


@router.get("/items", response_model=list[ItemOut])
def list_items(category: str | None = None, db: Session = Depends(get_db)):
    query = select(Item).where(Item.is_active.is_(True)).order_by(Item.code.asc())
    if category:
        query = query.where(Item.category == category)
    return list(db.scalars(query).all())


@router.post("/suppliers", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)):
    supplier = Supplier(
        code=payload.code.strip().upper(),
        name=payload.name.strip(),
        contact=payload.contact.strip() if payload.contact else None,
    )
    db.add(supplier)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Supplier code already exists") from exc
    db.refresh(supplier)
    return supplier


@router.get("/suppliers", response_model=list[SupplierOut])
def list_suppliers(db: Session = Depends(get_db)):
    return list(db.scalars(select(Supplier).order_by(Supplier.name.asc())).all())


@router.get("/locations/{location_id}/stock", response_model=LocationStockReportOut)
def location_stock(location_id: int, db: Session = Depends(get_db)):
    location = get_location_or_404(db, location_id)
    rows = db.execute(
        select(LocationStock, Item)
        .join(Item, Item.id == LocationStock.item_id)
        .where(LocationStock.location_id == location.id)
        .order_by(Item.code.asc())
    ).all()

    items = [
        LocationStockOut(
            item_id=item.id,
            item_code=item.code,
            item_name=item.name,
            unit=item.unit,
            on_hand=stock.on_hand,
            wac=stock.wac,
            value=stock_value(stock),
            updated_at=stock.updated_at,
        )
        for stock, item in rows
    ]
    return LocationStockReportOut(
        location=LocationRef.model_validate(location),
        items=items,
        total_value=sum((entry.value for entry in items), ZERO),
    )


@router.post(
    "/locations/{location_id}/deliveries",
    response_model=DeliveryOut,
    status_code=status.HTTP_201_CREATED,
)
def create_delivery(location_id: int, payload: DeliveryCreate, db: Session = Depends(get_db)):
    location = get_active_location(db, location_id)
    supplier = db.get(Supplier, payload.supplier_id)
    if not supplier:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    period = resolve_period(db, payload.period_id)
    require_open_posting(db, period, location.id)

    delivery = Delivery(
        delivery_no=next_document_number(db, Delivery.delivery_no, DELIVERY_PREFIX, payload.delivery_date),
        period_id=period.id,
        location_id=location.id,
        supplier_id=supplier.id,
        invoice_no=payload.invoice_no.strip() if payload.invoice_no else None,
        delivery_note=payload.delivery_note,
        delivery_date=payload.delivery_date,
    )
    total = ZERO
    for line in payload.lines:
        get_item_or_404(db, line.item_id)
        line_value = round_money(line.quantity * line.unit_price)
        receive_stock(db, location.id, line.item_id, line.quantity, line.unit_price)
        delivery.lines.append(
            DeliveryLine(
                item_id=line.item_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_value=line_value,
            )
        )
        total += line_value
    delivery.total_amount = total

    db.add(delivery)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Delivery number already exists") from exc
    db.refresh(delivery)
    return delivery


@router.get("/locations/{location_id}/deliveries", response_model=list[DeliveryOut])
def list_deliveries(location_id: int, period_id: int | None = None, db: Session = Depends(get_db)):
    location = get_location_or_404(db, location_id)
    query = select(Delivery).where(Delivery.location_id == location.id).order_by(Delivery.delivery_date.desc())
    if period_id is not None:
        query = query.where(Delivery.period_id == period_id)
    return list(db.scalars(query).all())


@router.post("/locations/{location_id}/issues", response_model=IssueOut, status_code=status.HTTP_201_CREATED)
def create_issue(location_id: int, payload: IssueCreate, db: Session = Depends(get_db)):
    location = get_active_location(db, location_id)
    period = resolve_period(db, payload.period_id)
    require_open_posting(db, period, location.id)
    for line in payload.lines:
        get_item_or_404(db, line.item_id)

    # Check every line up front so a short item never leaves a half-posted issue.
    validate_sufficient_stock(db, location, [(line.item_id, line.quantity) for line in payload.lines])

    issue = Issue(
        issue_no=next_document_number(db, Issue.issue_no, ISSUE_PREFIX, payload.issue_date),
        period_id=period.id,
        location_id=location.id,
        issue_date=payload.issue_date,
        cost_centre=payload.cost_centre,
        notes=payload.notes,
    )
    total = ZERO
    for line in payload.lines:
        _, wac = deduct_stock(db, location.id, line.item_id, line.quantity)
        line_value = round_money(line.quantity * wac)
        issue.lines.append(
            IssueLine(item_id=line.item_id, quantity=line.quantity, wac_at_issue=wac, line_value=line_value)
        )
        total += line_value
    issue.total_value = total

    db.add(issue)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Issue number already exists") from exc
    db.refresh(issue)
    return issue


@router.get("/locations/{location_id}/issues", response_model=list[IssueOut])
def list_issues(location_id: int, period_id: int | None = None, db: Session = Depends(get_db)):
    location = get_location_or_404(db, location_id)
    query = select(Issue).where(Issue.location_id == location.id).order_by(Issue.issue_date.desc())
    if period_id is not None:
        query = query.where(Issue.period_id == period_id)
    return list(db.scalars(query).all())


def _get_transfer_or_404(db: Session, transfer_id: int) -> Transfer:
    transfer = db.get(Transfer, transfer_id)
    if not transfer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transfer not found")
    return transfer


def _require_pending(transfer: Transfer) -> None:
    if transfer.status != TransferStatus.PENDING_APPROVAL:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Transfer is {transfer.status.value}, only pending transfers can be decided",
        )


@router.post("/transfers", response_model=TransferOut, status_code=status.HTTP_201_CREATED)
def create_transfer(payload: TransferCreate, db: Session = Depends(get_db)):
    if payload.from_location_id == payload.to_location_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Source and destination locations must differ",
        )
    source = get_active_location(db, payload.from_location_id)
    get_active_location(db, payload.to_location_id)
    for line in payload.lines:
        get_item_or_404(db, line.item_id)
    validate_sufficient_stock(db, source, [(line.item_id, line.quantity) for line in payload.lines])

    request_date = payload.request_date or date.today()
    transfer = Transfer(
        transfer_no=next_document_number(db, Transfer.transfer_no, TRANSFER_PREFIX, request_date),
        from_location_id=payload.from_location_id,
        to_location_id=payload.to_location_id,
        status=TransferStatus.PENDING_APPROVAL,
        request_date=request_date,
        notes=payload.notes,
    )
    total = ZERO
    for line in payload.lines:
        stock = get_stock(db, source.id, line.item_id)
        wac = Decimal(stock.wac)
        line_value = round_money(line.quantity * wac)
        transfer.lines.append(
            TransferLine(item_id=line.item_id, quantity=line.quantity, wac_at_transfer=wac, line_value=line_value)
        )
        total += line_value
    transfer.total_value = total

    db.add(transfer)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Transfer number already exists") from exc
    db.refresh(transfer)
    return transfer


@router.get("/transfers", response_model=list[TransferOut])
def list_transfers(
    location_id: int | None = None,
    status_filter: TransferStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
):
    query = select(Transfer).order_by(Transfer.created_at.desc())
    if location_id is not None:
        query = query.where(
            (Transfer.from_location_id == location_id) | (Transfer.to_location_id == location_id)
        )
    if status_filter is not None:
        query = query.where(Transfer.status == status_filter)
    return list(db.scalars(query).all())


@router.patch("/transfers/{transfer_id}/approve", response_model=TransferOut)
def approve_transfer(transfer_id: int, payload: TransferDecision | None = None, db: Session = Depends(get_db)):
    transfer = _get_transfer_or_404(db, transfer_id)
    _require_pending(transfer)
    decision = payload or TransferDecision()
    decided_on = decision.decision_date or date.today()

    source = get_location_or_404(db, transfer.from_location_id)
    # Stock may have moved since the request; recheck before touching either side.
    validate_sufficient_stock(db, source, [(line.item_id, Decimal(line.quantity)) for line in transfer.lines])
    for line in transfer.lines:
        quantity = Decimal(line.quantity)
        deduct_stock(db, transfer.from_location_id, line.item_id, quantity)
        receive_stock(db, transfer.to_location_id, line.item_id, quantity, Decimal(line.wac_at_transfer))

    transfer.status = TransferStatus.COMPLETED
    transfer.approval_date = decided_on
    transfer.transfer_date = decided_on
    if decision.notes:
        transfer.notes = decision.notes
    db.commit()
    db.refresh(transfer)
    logger.info(
        "transfer %s completed from location=%s to location=%s value=%s",
        transfer.transfer_no,
        transfer.from_location_id,
        transfer.to_location_id,
        transfer.total_value,
    )
    return transfer


@router.patch("/transfers/{transfer_id}/reject", response_model=TransferOut)
def reject_transfer(transfer_id: int, payload: TransferDecision | None = None, db: Session = Depends(get_db)):
    transfer = _get_transfer_or_404(db, transfer_id)
    _require_pending(transfer)
    decision = payload or TransferDecision()

    transfer.status = TransferStatus.REJECTED
    transfer.approval_date = decision.decision_date or date.today()
    if decision.notes:
        transfer.notes = decision.notes
    db.commit()
    db.refresh(transfer)
    logger.info("transfer %s rejected", transfer.transfer_no)
    return transfer


def _pob_out(entry: POB) -> POBEntryOut:
    return POBEntryOut(
        id=entry.id,
        period_id=entry.period_id,
        location_id=entry.location_id,
        entry_date=entry.entry_date,
        crew_count=entry.crew_count,
        extra_count=entry.extra_count,
        total_count=entry.crew_count + entry.extra_count,
        entered_at=entry.entered_at,
        updated_at=entry.updated_at,
    )


def _pob_listing(db: Session, location: Location, period: Period) -> POBListOut:
    entries = [
        _pob_out(entry)
        for entry in db.scalars(
            select(POB)
            .where(POB.location_id == location.id, POB.period_id == period.id)
            .order_by(POB.entry_date.asc())
        )
    ]
    return POBListOut(
        location=LocationRef.model_validate(location),
        period_id=period.id,
        entries=entries,
        summary=POBSummaryOut(
            total_crew_count=sum(entry.crew_count for entry in entries),
            total_extra_count=sum(entry.extra_count for entry in entries),
            total_mandays=sum(entry.total_count for entry in entries),
            entries_count=len(entries),
        ),
    )


def _require_editable_period(period: Period) -> None:
    if period.status == PeriodStatus.CLOSED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "PERIOD_CLOSED", "message": "Cannot change POB for a closed period"},
        )


@router.get("/locations/{location_id}/pob", response_model=POBListOut)
def list_pob(location_id: int, period_id: int | None = None, db: Session = Depends(get_db)):
    location = get_location_or_404(db, location_id)
    period = resolve_period(db, period_id)
    return _pob_listing(db, location, period)


@router.post("/locations/{location_id}/pob", response_model=POBListOut)
def upsert_pob(location_id: int, payload: POBUpsertRequest, db: Session = Depends(get_db)):
    location = get_location_or_404(db, location_id)
    period = resolve_period(db, payload.period_id)
    _require_editable_period(period)

    for entry in payload.entries:
        if entry.entry_date < period.start_date or entry.entry_date > period.end_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"POB date {entry.entry_date.isoformat()} is outside period {period.name}",
            )
        existing = db.scalar(
            select(POB).where(
                POB.period_id == period.id,
                POB.location_id == location.id,
                POB.entry_date == entry.entry_date,
            )
        )
        if existing:
            existing.crew_count = entry.crew_count
            existing.extra_count = entry.extra_count
        else:
            db.add(
                POB(
                    period_id=period.id,
                    location_id=location.id,
                    entry_date=entry.entry_date,
                    crew_count=entry.crew_count,
                    extra_count=entry.extra_count,
                )
            )
            db.flush()
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="POB entry already exists") from exc
    return _pob_listing(db, location, period)


@router.patch("/pob/{pob_id}", response_model=POBEntryOut)
def update_pob(pob_id: int, payload: POBUpdate, db: Session = Depends(get_db)):
    entry = db.get(POB, pob_id)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="POB entry not found")
    _require_editable_period(get_period_or_404(db, entry.period_id))

    if payload.crew_count is not None:
        entry.crew_count = payload.crew_count
    if payload.extra_count is not None:
        entry.extra_count = payload.extra_count
    db.commit()
    db.refresh(entry)
    return _pob_out(entry)
