from decimal import Decimal


def _prepare(client):
    """One kitchen with January movements: 1000 received, 300 issued, 700 left on hand, 30 mandays."""
    kitchen = client.post("/locations", json={"code": "kit1", "name": "Main Kitchen", "type": "KITCHEN"}).json()
    rice = client.post("/items", json={"code": "rice", "name": "Basmati Rice", "unit": "KG"}).json()
    supplier = client.post("/suppliers", json={"code": "sup1", "name": "Gulf Foods"}).json()
    period = client.post(
        "/periods",
        json={"name": "January 2025", "start_date": "2025-01-01", "end_date": "2025-01-31"},
    ).json()
    client.post(f"/periods/{period['id']}/open")
    client.post(
        f"/locations/{kitchen['id']}/deliveries",
        json={
            "supplier_id": supplier["id"],
            "delivery_date": "2025-01-05",
            "lines": [{"item_id": rice["id"], "quantity": "100", "unit_price": "10"}],
        },
    )
    client.post(
        f"/locations/{kitchen['id']}/issues",
        json={"issue_date": "2025-01-10", "lines": [{"item_id": rice["id"], "quantity": "30"}]},
    )
    client.post(
        f"/locations/{kitchen['id']}/pob",
        json={
            "entries": [
                {"entry_date": "2025-01-01", "crew_count": 10},
                {"entry_date": "2025-01-02", "crew_count": 8, "extra_count": 2},
                {"entry_date": "2025-01-03", "crew_count": 10},
            ]
        },
    )
    return kitchen, rice, supplier, period


def _url(location_id, period_id):
    return f"/locations/{location_id}/reconciliations/{period_id}"


def test_get_returns_auto_calculated_preview_without_saving(client):
    kitchen, _, _, period = _prepare(client)

    resp = client.get(_url(kitchen["id"], period["id"]))

    assert resp.status_code == 200
    body = resp.json()
    assert body["is_auto_calculated"] is True
    assert body["currency"] == "SAR"
    assert body["reconciliation"]["id"] is None
    assert Decimal(body["reconciliation"]["receipts"]) == Decimal("1000.00")
    assert Decimal(body["reconciliation"]["issues"]) == Decimal("300.00")
    assert Decimal(body["reconciliation"]["closing_stock"]) == Decimal("700.00")
    assert Decimal(body["calculations"]["consumption"]) == Decimal("0")
    assert body["calculations"]["total_mandays"] == 30

    # Still a preview on the next read.
    assert client.get(_url(kitchen["id"], period["id"])).json()["is_auto_calculated"] is True


def test_patch_saves_baseline_and_merges_adjustments(client):
    kitchen, _, _, period = _prepare(client)

    first = client.patch(_url(kitchen["id"], period["id"]), json={"back_charges": "120", "credits": "30"})
    assert first.status_code == 200
    body = first.json()
    assert body["is_auto_calculated"] is False
    assert body["reconciliation"]["id"] is not None
    assert Decimal(body["calculations"]["total_adjustments"]) == Decimal("150.00")
    assert Decimal(body["calculations"]["consumption"]) == Decimal("150.00")
    assert Decimal(body["calculations"]["manday_cost"]) == Decimal("5.00")
    assert Decimal(body["calculations"]["breakdown"]["back_charges"]) == Decimal("120.00")

    second = client.patch(_url(kitchen["id"], period["id"]), json={"condemnations": "-15.5"})
    saved = second.json()["reconciliation"]
    assert saved["id"] == body["reconciliation"]["id"]
    assert Decimal(saved["back_charges"]) == Decimal("120.00")
    assert Decimal(saved["credits"]) == Decimal("30.00")
    assert Decimal(saved["condemnations"]) == Decimal("-15.50")
    assert Decimal(second.json()["calculations"]["consumption"]) == Decimal("134.50")


def test_patch_is_idempotent(client):
    kitchen, _, _, period = _prepare(client)
    payload = {"adjustments": "45.25"}

    first = client.patch(_url(kitchen["id"], period["id"]), json=payload).json()
    second = client.patch(_url(kitchen["id"], period["id"]), json=payload).json()

    assert first["reconciliation"]["id"] == second["reconciliation"]["id"]
    assert first["calculations"]["consumption"] == second["calculations"]["consumption"]


def test_saved_baseline_ignores_later_movements(client):
    kitchen, rice, supplier, period = _prepare(client)
    client.patch(_url(kitchen["id"], period["id"]), json={})

    client.post(
        f"/locations/{kitchen['id']}/deliveries",
        json={
            "supplier_id": supplier["id"],
            "delivery_date": "2025-01-20",
            "lines": [{"item_id": rice["id"], "quantity": "5", "unit_price": "10"}],
        },
    )

    body = client.get(_url(kitchen["id"], period["id"])).json()
    assert Decimal(body["reconciliation"]["receipts"]) == Decimal("1000.00")
    assert Decimal(body["reconciliation"]["closing_stock"]) == Decimal("700.00")


def test_missing_location_or_period_is_not_found(client):
    kitchen, _, _, period = _prepare(client)

    assert client.get(_url(999, period["id"])).status_code == 404
    assert client.get(_url(kitchen["id"], 999)).status_code == 404
    assert client.patch(_url(kitchen["id"], 999), json={"credits": "1"}).status_code == 404


def test_invalid_adjustment_is_rejected(client):
    kitchen, _, _, period = _prepare(client)

    resp = client.patch(_url(kitchen["id"], period["id"]), json={"credits": "lots"})

    assert resp.status_code == 422


def test_post_reconciliation_requires_open_period(client):
    kitchen, _, _, period = _prepare(client)
    draft = client.post(
        "/periods",
        json={"name": "February 2025", "start_date": "2025-02-01", "end_date": "2025-02-28"},
    ).json()

    created = client.post(
        "/reconciliations",
        json={"period_id": period["id"], "location_id": kitchen["id"], "back_charges": "10"},
    )
    assert created.status_code == 201
    assert Decimal(created.json()["reconciliation"]["back_charges"]) == Decimal("10.00")

    repeated = client.post("/reconciliations", json={"period_id": period["id"], "location_id": kitchen["id"]})
    assert repeated.status_code == 200
    assert Decimal(repeated.json()["reconciliation"]["back_charges"]) == Decimal("10.00")

    rejected = client.post("/reconciliations", json={"period_id": draft["id"], "location_id": kitchen["id"]})
    assert rejected.status_code == 400
    assert rejected.json()["detail"]["code"] == "PERIOD_NOT_OPEN"


def test_consolidated_totals_across_locations(client):
    kitchen, rice, supplier, period = _prepare(client)
    store = client.post("/locations", json={"code": "str1", "name": "Dry Store", "type": "STORE"}).json()
    client.post(
        f"/locations/{store['id']}/deliveries",
        json={
            "supplier_id": supplier["id"],
            "delivery_date": "2025-01-06",
            "lines": [{"item_id": rice["id"], "quantity": "10", "unit_price": "20"}],
        },
    )
    client.post(f"/locations/{store['id']}/pob", json={"entries": [{"entry_date": "2025-01-01", "crew_count": 5}]})
    client.patch(_url(kitchen["id"], period["id"]), json={"back_charges": "350"})

    resp = client.get("/reconciliations/consolidated", params={"period_id": period["id"]})

    assert resp.status_code == 200
    body = resp.json()
    assert [entry["location"]["code"] for entry in body["locations"]] == ["KIT1", "STR1"]
    totals = body["grand_totals"]
    assert Decimal(totals["receipts"]) == Decimal("1200.00")
    assert Decimal(totals["closing_stock"]) == Decimal("900.00")
    assert Decimal(totals["back_charges"]) == Decimal("350.00")
    assert Decimal(totals["consumption"]) == Decimal("350.00")
    assert totals["total_mandays"] == 35
    assert Decimal(totals["average_manday_cost"]) == Decimal("10.00")
    assert body["summary"] == {
        "total_locations": 2,
        "locations_with_saved_reconciliations": 1,
        "locations_with_auto_calculated": 1,
    }

    # Defaults to the open period.
    assert client.get("/reconciliations/consolidated").json()["period"]["id"] == period["id"]


def test_oversized_adjustment_is_rejected(client):
    kitchen, _, _, period = _prepare(client)

    assert client.patch(_url(kitchen["id"], period["id"]), json={"back_charges": 1e30}).status_code == 422
    assert client.patch(_url(kitchen["id"], period["id"]), json={"credits": "123456789012345678.99"}).status_code == 422
    assert client.patch(_url(kitchen["id"], period["id"]), json={"adjustments": "0.001"}).status_code == 422

    assert client.get(_url(kitchen["id"], period["id"])).json()["is_auto_calculated"] is True
