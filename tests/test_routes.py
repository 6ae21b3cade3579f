from datetime import datetime, timedelta, timezone

from conftest import AUTH, customer_row, vehicle_row

API = "/car-service/api/v1"
VEHICLE_BY_ID = "FROM cars.vehicles v WHERE v.id"


# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------

def test_list_vehicles_returns_page_with_visible_siblings(client, db):
    db.on("SELECT COUNT(*) AS total", rows=[{"total": 1}])
    db.on(
        "LEFT JOIN cars.vehicle_shipping vs",
        rows=[vehicle_row(1, vs_vehicle_id=1, vs_shipping_status="SHIPPED")],
    )

    resp = client.get(f"{API}/vehicles?make=Toyota&page=1&limit=10", headers=AUTH)

    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"] == {"total": 1, "page": 1, "limit": 10, "pages": 1}
    item = body["data"][0]
    assert item["vehicle"]["make"] == "Toyota"
    assert item["shipping"]["shipping_status"] == "SHIPPED"
    assert item["financials"] is None

    list_sql, list_args = db.statements("LEFT JOIN cars.vehicle_shipping vs")[0]
    assert "v.make = $1" in list_sql
    assert list_sql.endswith("ORDER BY v.created_at DESC, v.id DESC LIMIT $2")
    assert list_args == ("Toyota", 10)


def test_invalid_paging_falls_back_to_defaults(client, db):
    db.on("SELECT COUNT(*) AS total", rows=[{"total": 31}])

    resp = client.get(f"{API}/vehicles?page=0&limit=abc", headers=AUTH)

    assert resp.status_code == 200
    assert resp.json()["meta"] == {"total": 31, "page": 1, "limit": 10, "pages": 4}


def test_later_page_sets_offset(client, db):
    client.get(f"{API}/vehicles?page=3&limit=5", headers=AUTH)

    list_sql, list_args = db.calls[0]
    assert list_sql.endswith("LIMIT $1 OFFSET $2")
    assert list_args == (5, 10)


def test_unknown_order_field_is_bad_request(client):
    resp = client.get(f"{API}/vehicles?order_by=secret_column", headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == {
        "code": "BAD_REQUEST",
        "message": "Invalid order_by field: secret_column",
    }


def test_missing_token_is_unauthorized(client):
    resp = client.get(f"{API}/vehicles")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHORIZED"


def test_missing_permission_is_rejected(client, verifier, db):
    verifier.permissions = frozenset({"vehicle.access"})
    resp = client.delete(f"{API}/vehicles/1", headers=AUTH)
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "No Valid Permission"
    assert db.calls == []


def test_dropdown_options_need_no_token(client):
    resp = client.get(f"{API}/vehicles/dropdown/options")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert "PROCESSING" in data["shipping_statuses"]
    assert data["currencies"] == ["JPY", "USD", "LKR", "EUR", "GBP"]


def test_create_vehicle(client, db, notifier):
    db.on("INSERT INTO cars.vehicles (", rows=[vehicle_row(5)])

    resp = client.post(
        f"{API}/vehicles",
        json={"make": "Toyota", "model": "Prius", "chassis_id": "ZVW30-00005"},
        headers=AUTH,
    )

    assert resp.status_code == 201
    assert resp.json()["data"]["id"] == 5
    assert db.events == ["begin", "commit"]
    assert notifier.types() == ["vehicle_created"]


def test_malformed_json_is_bad_request(client):
    resp = client.post(
        f"{API}/vehicles",
        content=b"{not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "BAD_REQUEST"


def test_shipping_update_route(client, db, notifier):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on("FROM cars.vehicle_shipping WHERE vehicle_id", rows=[{"vehicle_id": 1, "shipping_status": "PROCESSING"}])
    db.on("INSERT INTO cars.vehicle_shipping_history", rows=[{"id": 1}])

    resp = client.put(f"{API}/vehicles/1/shipping", json={"shipping_status": "IN_TRANSIT"}, headers=AUTH)

    assert resp.status_code == 200
    assert resp.json() == {"message": "Shipping status updated successfully"}
    assert notifier.types() == ["shipping_status"]


def test_get_missing_vehicle_is_not_found(client):
    resp = client.get(f"{API}/vehicles/77", headers=AUTH)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


# ---------------------------------------------------------------------------
# Image uploads
# ---------------------------------------------------------------------------

def _image_row():
    return {
        "id": 60, "vehicle_id": 1, "filename": "obj1_a.jpg", "original_name": "a.jpg",
        "file_path": "vehicles/1/images/obj1_a.jpg", "file_size": 3, "mime_type": "image/jpeg",
        "is_primary": True, "display_order": 1,
    }


def test_partial_image_upload_is_multi_status(client, db, store):
    store.fail.add("b.jpg")
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on("INSERT INTO cars.vehicle_images", rows=[_image_row()])

    resp = client.post(
        f"{API}/vehicles/upload-image/1",
        files=[
            ("images", ("a.jpg", b"abc", "image/jpeg")),
            ("images", ("b.jpg", b"def", "image/jpeg")),
        ],
        headers=AUTH,
    )

    assert resp.status_code == 207
    body = resp.json()
    data = body["data"]
    assert data["total_uploaded"] == 1
    assert data["total_files"] == 2
    assert len(body["errors"]) == 1 and "b.jpg" in body["errors"][0]
    assert body["partial_success"] is True
    assert "errors" not in data
    assert data["uploaded_images"][0]["is_primary"] is True


def test_image_upload_with_no_success_is_bad_request(client, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])

    resp = client.post(
        f"{API}/vehicles/upload-image/1",
        files=[("images", ("notes.txt", b"hello", "text/plain"))],
        headers=AUTH,
    )

    assert resp.status_code == 400
    assert resp.json()["data"]["total_uploaded"] == 0
    assert len(resp.json()["errors"]) == 1


def test_full_image_upload_is_created(client, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on("INSERT INTO cars.vehicle_images", rows=[_image_row()])

    resp = client.post(
        f"{API}/vehicles/upload-image/1",
        files=[("images", ("a.jpg", b"abc", "image/jpeg"))],
        headers=AUTH,
    )

    assert resp.status_code == 201
    assert "errors" not in resp.json()
    assert "errors" not in resp.json()["data"]


# ---------------------------------------------------------------------------
# Share links
# ---------------------------------------------------------------------------

def test_share_link_round_trip(client, db):
    db.on("SELECT 1 AS found FROM cars.vehicles", rows=[{"found": 1}])
    db.on("INSERT INTO cars.vehicle_share_tokens", rows=[{"id": 1}])

    created = client.post(f"{API}/share/vehicle/1", json={"include_details": ["shipping"]}, headers=AUTH)

    assert created.status_code == 201
    share = created.json()["data"]
    assert share["share_url"].endswith(share["token"])

    db.on(
        "FROM cars.vehicle_share_tokens",
        rows=[{
            "id": 1, "vehicle_id": 1, "token": share["token"],
            "expires_at": datetime.now(timezone.utc) + timedelta(days=7),
            "include_details": ["shipping"],
        }],
    )
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on("FROM cars.vehicle_shipping WHERE vehicle_id", rows=[{"vehicle_id": 1, "shipping_status": "ARRIVED"}])

    public = client.get(f"{API}/share/vehicle/public/{share['token']}")

    assert public.status_code == 200
    data = public.json()["data"]
    assert data["shipping_status"] == "ARRIVED"
    assert "vessel_name" not in data
    assert "total_cost_lkr" not in data
    assert "images" not in data


def test_public_share_with_unknown_token(client):
    resp = client.get(f"{API}/share/vehicle/public/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Invalid or expired share token"


# ---------------------------------------------------------------------------
# Customers, orders, analytics
# ---------------------------------------------------------------------------

def test_create_customer_route(client, db, notifier):
    db.on("INSERT INTO cars.customers", rows=[customer_row(7)])

    resp = client.post(
        f"{API}/customers",
        json={"customer_name": "Nimal Perera", "customer_type": "INDIVIDUAL"},
        headers=AUTH,
    )

    assert resp.status_code == 201
    assert resp.json()["message"] == "Customer created successfully"
    assert notifier.types() == ["customer_created"]


def test_order_submission_needs_no_token(client, db):
    db.on("INSERT INTO cars.customers", rows=[customer_row(12)])
    db.on("INSERT INTO cars.customer_orders", rows=[{"id": 40}])
    db.on(
        "FROM cars.customer_orders co",
        rows=[{"id": 40, "order_number": "ORD-1-12", "customer_id": 12, "order_status": "SUBMITTED"}],
    )

    resp = client.post(
        f"{API}/orders",
        json={
            "customer_name": "Sunil", "contact_number": "0719999999",
            "preferred_make": "Honda", "preferred_model": "Vezel",
        },
    )

    assert resp.status_code == 201
    assert resp.json()["data"]["order_number"] == "ORD-1-12"


def test_shipping_status_analytics(client, db):
    db.on("FROM cars.vehicle_shipping vs", rows=[{"status": "SHIPPED", "vehicle_count": 3}])

    resp = client.get(
        f"{API}/analytics/shipping-status?dateRangeStart=2024-01-01&dateRangeEnd=2024-12-31",
        headers=AUTH,
    )

    assert resp.status_code == 200
    assert resp.json() == {"data": {"SHIPPED": 3}}
    (sql, args), = db.calls
    assert "vs.created_at BETWEEN $1 AND $2" in sql
    assert len(args) == 2


def test_analytics_rejects_malformed_date(client):
    resp = client.get(f"{API}/analytics/sales-status?dateRangeStart=yesterday", headers=AUTH)
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Ambient
# ---------------------------------------------------------------------------

def test_liveness_probe(client):
    resp = client.get("/health/live")
    assert resp.status_code == 200
    assert resp.json() == {"status": "alive"}


def test_request_id_is_propagated(client):
    resp = client.get("/health/live", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    assert client.get("/health/live").headers["X-Request-ID"]
