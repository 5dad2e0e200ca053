from datetime import datetime, time

API = "/api/v1"
SID = "browser-session-77"


def _place_order(client, pickup_day, slot=time(9, 0)):
    groups = client.get(f"{API}/menu/by-category").json()
    gulyas_id = next(i["id"] for g in groups for i in g["items"] if i["name"] == "Gulyás")
    client.post(f"{API}/carts/{SID}/items", json={"item_id": gulyas_id, "quantity": 2})
    response = client.post(
        f"{API}/carts/{SID}/checkout",
        json={
            "name": "Teszt Elek",
            "phone": "+36301234567",
            "pickup_time": datetime.combine(pickup_day, slot).isoformat(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def test_staff_routes_require_token(client):
    assert client.get(f"{API}/staff/orders").status_code == 401


def test_wrong_password_is_rejected(client):
    response = client.post(
        f"{API}/auth/login", data={"username": "admin", "password": "wrong-password"}
    )
    assert response.status_code == 401


def test_me_returns_staff_profile(client, staff_headers):
    body = client.get(f"{API}/auth/me", headers=staff_headers).json()
    assert body["username"] == "admin"
    assert body["role"] == "admin"


def test_refresh_and_logout(client):
    tokens = client.post(
        f"{API}/auth/login", data={"username": "admin", "password": "Admin1234!"}
    ).json()

    refreshed = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]

    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    logout = client.post(
        f"{API}/auth/logout", json={"refresh_token": tokens["refresh_token"]}, headers=headers
    )
    assert logout.status_code == 204
    again = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert again.status_code == 401


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

def test_order_workflow(client, staff_headers, pickup_day):
    order = _place_order(client, pickup_day)
    url = f"{API}/staff/orders/{order['id']}"

    listed = client.get(
        f"{API}/staff/orders",
        params={"day": pickup_day.isoformat(), "status": "new"},
        headers=staff_headers,
    ).json()
    assert [o["code"] for o in listed] == [order["code"]]

    preparing = client.patch(f"{url}/status", json={"status": "preparing"}, headers=staff_headers)
    assert preparing.json()["status"] == "preparing"
    assert client.post(f"{url}/archive", headers=staff_headers).status_code == 409

    client.patch(f"{url}/status", json={"status": "ready"}, headers=staff_headers)
    client.patch(f"{url}/status", json={"status": "completed"}, headers=staff_headers)
    reopened = client.patch(f"{url}/status", json={"status": "new"}, headers=staff_headers)
    assert reopened.status_code == 409

    archived = client.post(f"{url}/archive", headers=staff_headers).json()
    assert archived["archived"] is True
    assert client.get(f"{API}/staff/orders", headers=staff_headers).json() == []


def test_unknown_order_is_404(client, staff_headers):
    assert client.get(f"{API}/staff/orders/424242", headers=staff_headers).status_code == 404


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

def test_new_orders_are_announced_once(client, staff_headers, pickup_day):
    primed = client.get(f"{API}/staff/notifications", headers=staff_headers).json()
    assert primed["current"] is None
    assert primed["new_orders_count"] == 0

    first = _place_order(client, pickup_day, time(9, 0))
    second = _place_order(client, pickup_day, time(9, 30))

    feed = client.get(f"{API}/staff/notifications", headers=staff_headers).json()
    assert [n["code"] for n in feed["pending"]] == [first["code"], second["code"]]
    assert feed["current"]["code"] == first["code"]
    assert feed["new_orders_count"] == 2

    feed = client.post(f"{API}/staff/notifications/dismiss", headers=staff_headers).json()
    assert feed["current"]["code"] == second["code"]

    feed = client.post(f"{API}/staff/notifications/clear-count", headers=staff_headers).json()
    assert feed["new_orders_count"] == 0
    assert len(feed["pending"]) == 1


# ---------------------------------------------------------------------------
# Prep summary
# ---------------------------------------------------------------------------

def test_prep_summary_and_pdf(client, staff_headers, pickup_day):
    _place_order(client, pickup_day)
    params = {"day": pickup_day.isoformat()}

    summary = client.get(f"{API}/staff/prep-summary", params=params, headers=staff_headers).json()
    assert summary["items"] == [{"name": "Gulyás", "quantity": 2, "revenue_huf": 2400}]
    assert summary["total_orders"] == 1

    pdf = client.get(f"{API}/staff/prep-summary/pdf", params=params, headers=staff_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
