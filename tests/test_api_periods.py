from decimal import Decimal


def _location(client, code, name):
    return client.post("/locations", json={"code": code, "name": name, "type": "KITCHEN"}).json()


def _period(client, name="January 2025", start="2025-01-01", end="2025-01-31"):
    return client.post("/periods", json={"name": name, "start_date": start, "end_date": end})


def test_create_period_includes_active_locations(client):
    kitchen = _location(client, "kit1", "Main Kitchen")
    inactive = _location(client, "kit2", "Old Kitchen")
    client.patch(f"/locations/{inactive['id']}", json={"is_active": False})

    resp = _period(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "DRAFT"
    assert [entry["location"]["id"] for entry in body["locations"]] == [kitchen["id"]]
    assert body["locations"][0]["status"] == "OPEN"


def test_period_validation(client):
    assert _period(client, start="2025-01-31", end="2025-01-01").status_code == 422
    assert _period(client).status_code == 201
    assert _period(client, "Overlap", "2025-01-15", "2025-02-15").status_code == 400


def test_only_one_period_can_be_open(client):
    january = _period(client).json()
    february = _period(client, "February 2025", "2025-02-01", "2025-02-28").json()

    assert client.get("/periods/current").status_code == 404
    assert client.post(f"/periods/{january['id']}/open").json()["status"] == "OPEN"
    assert client.post(f"/periods/{february['id']}/open").status_code == 409
    assert client.post(f"/periods/{january['id']}/open").status_code == 400
    assert client.get("/periods/current").json()["id"] == january["id"]
    assert [entry["name"] for entry in client.get("/periods", params={"status": "DRAFT"}).json()] == ["February 2025"]


def test_ready_requires_saved_reconciliation(client):
    kitchen = _location(client, "kit1", "Main Kitchen")
    period = _period(client).json()
    client.post(f"/periods/{period['id']}/open")
    ready_url = f"/periods/{period['id']}/locations/{kitchen['id']}/ready"

    resp = client.patch(ready_url)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "RECONCILIATION_NOT_COMPLETED"

    client.patch(f"/locations/{kitchen['id']}/reconciliations/{period['id']}", json={})
    resp = client.patch(ready_url)
    assert resp.status_code == 200
    assert resp.json()["status"] == "READY"
    assert resp.json()["ready_at"] is not None

    unready = client.patch(f"/periods/{period['id']}/locations/{kitchen['id']}/unready")
    assert unready.json()["status"] == "OPEN"
    assert client.patch(f"/periods/{period['id']}/locations/{kitchen['id']}/unready").status_code == 400


def test_close_requires_every_location_ready(client):
    kitchen = _location(client, "kit1", "Main Kitchen")
    store = _location(client, "str1", "Dry Store")
    period = _period(client).json()
    client.post(f"/periods/{period['id']}/open")
    client.patch(f"/locations/{kitchen['id']}/reconciliations/{period['id']}", json={})
    client.patch(f"/periods/{period['id']}/locations/{kitchen['id']}/ready")

    resp = client.post(f"/periods/{period['id']}/close")

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "LOCATIONS_NOT_READY"
    assert [entry["location_id"] for entry in detail["locations"]] == [store["id"]]
    assert client.get(f"/periods/{period['id']}").json()["status"] == "OPEN"


def test_close_period_copies_values_and_feeds_next_opening(client):
    kitchen = _location(client, "kit1", "Main Kitchen")
    rice = client.post("/items", json={"code": "rice", "name": "Basmati Rice", "unit": "KG"}).json()
    supplier = client.post("/suppliers", json={"code": "sup1", "name": "Gulf Foods"}).json()
    january = _period(client).json()
    client.post(f"/periods/{january['id']}/open")
    client.post(
        f"/locations/{kitchen['id']}/deliveries",
        json={
            "supplier_id": supplier["id"],
            "delivery_date": "2025-01-05",
            "lines": [{"item_id": rice["id"], "quantity": "80", "unit_price": "12.5"}],
        },
    )
    client.patch(f"/locations/{kitchen['id']}/reconciliations/{january['id']}", json={})
    client.patch(f"/periods/{january['id']}/locations/{kitchen['id']}/ready")

    closed = client.post(f"/periods/{january['id']}/close")

    assert closed.status_code == 200
    body = closed.json()
    assert body["status"] == "CLOSED"
    assert body["closed_at"] is not None
    location_entry = body["locations"][0]
    assert location_entry["status"] == "CLOSED"
    assert Decimal(location_entry["opening_value"]) == Decimal("0")
    assert Decimal(location_entry["closing_value"]) == Decimal("1000.00")
    assert client.post(f"/periods/{january['id']}/close").status_code == 400
    assert client.patch(f"/periods/{january['id']}/locations/{kitchen['id']}/ready").status_code == 400
    assert (
        client.patch(f"/locations/{kitchen['id']}/reconciliations/{january['id']}", json={"credits": "1"}).status_code
        == 400
    )

    february = _period(client, "February 2025", "2025-02-01", "2025-02-28").json()
    client.post(f"/periods/{february['id']}/open")
    preview = client.get(f"/locations/{kitchen['id']}/reconciliations/{february['id']}").json()
    assert Decimal(preview["reconciliation"]["opening_stock"]) == Decimal("1000.00")
    assert Decimal(preview["reconciliation"]["receipts"]) == Decimal("0")


def _closed_january(client):
    kitchen = _location(client, "kit1", "Main Kitchen")
    store = _location(client, "str1", "Dry Store")
    rice = client.post("/items", json={"code": "rice", "name": "Basmati Rice", "unit": "KG"}).json()
    supplier = client.post("/suppliers", json={"code": "sup1", "name": "Gulf Foods"}).json()
    january = _period(client).json()
    client.post(f"/periods/{january['id']}/open")
    client.post(
        f"/locations/{kitchen['id']}/deliveries",
        json={
            "supplier_id": supplier["id"],
            "delivery_date": "2025-01-05",
            "lines": [{"item_id": rice["id"], "quantity": "40", "unit_price": "10"}],
        },
    )
    for location in (kitchen, store):
        client.patch(f"/locations/{location['id']}/reconciliations/{january['id']}", json={})
        client.patch(f"/periods/{january['id']}/locations/{location['id']}/ready")
    client.post(f"/periods/{january['id']}/close")
    return kitchen, store, january


def test_roll_forward_creates_next_draft_period(client):
    kitchen, store, january = _closed_january(client)
    late = _location(client, "kit3", "New Kitchen")

    resp = client.post(f"/periods/{january['id']}/roll-forward")

    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "February 2025"
    assert body["start_date"] == "2025-02-01"
    assert body["end_date"] == "2025-02-28"
    assert body["status"] == "DRAFT"
    opening = {entry["location"]["id"]: entry["opening_value"] for entry in body["locations"]}
    assert Decimal(opening[kitchen["id"]]) == Decimal("400.00")
    assert Decimal(opening[store["id"]]) == Decimal("0")
    assert opening[late["id"]] is None
    assert {entry["status"] for entry in body["locations"]} == {"OPEN"}

    again = client.post(f"/periods/{january['id']}/roll-forward")
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "OVERLAPPING_PERIOD"


def test_roll_forward_with_custom_name_and_end_date(client):
    _, _, january = _closed_january(client)

    resp = client.post(
        f"/periods/{january['id']}/roll-forward",
        json={"name": "Feb-Mar 2025", "end_date": "2025-03-15"},
    )

    assert resp.status_code == 201
    assert resp.json()["name"] == "Feb-Mar 2025"
    assert resp.json()["end_date"] == "2025-03-15"

    backwards = client.post(f"/periods/{january['id']}/roll-forward", json={"end_date": "2025-01-20"})
    assert backwards.status_code == 400
    assert backwards.json()["detail"]["code"] == "INVALID_DATE_RANGE"


def test_roll_forward_requires_closed_period(client):
    period = _period(client).json()
    client.post(f"/periods/{period['id']}/open")

    resp = client.post(f"/periods/{period['id']}/roll-forward")

    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "PERIOD_NOT_CLOSED"
    assert client.post("/periods/999/roll-forward").status_code == 404
