import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront import models, notifications


def test_order_total_is_priced_from_catalog(client, make_product, order_payload):
    ketchup = make_product(name="Ketchup", price=250)

    resp = client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 3}])
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["totalAmount"] == 750
    assert body["status"] == "pending"
    assert len(body["items"]) == 1
    item = body["items"][0]
    assert item["price"] == 250
    assert item["quantity"] == 3
    assert item["productId"] == ketchup.id
    assert item["orderId"] == body["id"]


def test_client_supplied_prices_are_ignored(client, make_product, order_payload):
    ketchup = make_product(name="Ketchup", price=250)
    payload = order_payload([{"productId": ketchup.id, "quantity": 2, "price": 1}])
    payload["totalAmount"] = 2

    body = client.post("/api/orders", json=payload).json()

    assert body["totalAmount"] == 500
    assert body["items"][0]["price"] == 250


def test_multi_line_order_total(client, make_product, order_payload, count_rows):
    ketchup = make_product(name="Ketchup", price=250)
    kabab = make_product(name="Chicken Kabab", price=150, category="Frozen")

    resp = client.post(
        "/api/orders",
        json=order_payload(
            [
                {"productId": ketchup.id, "quantity": 2},
                {"productId": kabab.id, "quantity": 4},
            ]
        ),
    )

    assert resp.status_code == 201
    assert resp.json()["totalAmount"] == 2 * 250 + 4 * 150
    assert [item["price"] for item in resp.json()["items"]] == [250, 150]
    assert count_rows(models.OrderItem) == 2


def test_unknown_product_writes_nothing(client, make_product, order_payload, count_rows):
    ketchup = make_product()

    resp = client.post(
        "/api/orders",
        json=order_payload(
            [
                {"productId": ketchup.id, "quantity": 1},
                {"productId": 4242, "quantity": 1},
            ]
        ),
    )

    assert resp.status_code == 400
    assert resp.json() == {"message": "Product 4242 not found"}
    assert count_rows(models.Order) == 0
    assert count_rows(models.OrderItem) == 0


def test_deleted_product_cannot_be_ordered(admin_client, make_product, order_payload, count_rows):
    ketchup = make_product()
    admin_client.delete(f"/api/products/{ketchup.id}")

    resp = admin_client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    )

    assert resp.status_code == 400
    assert count_rows(models.Order) == 0


@pytest.mark.parametrize(
    "change, field",
    [
        ({"items": []}, "items"),
        ({"items": [{"productId": 1, "quantity": 0}]}, "items.0.quantity"),
        ({"items": [{"productId": 1, "quantity": 2**31}]}, "items.0.quantity"),
        ({"customerName": ""}, "customerName"),
        ({"customerEmail": "not-an-email"}, "customerEmail"),
    ],
)
def test_invalid_order_is_rejected_before_pricing(client, order_payload, count_rows, change, field):
    payload = order_payload([{"productId": 1, "quantity": 1}])
    payload.update(change)

    resp = client.post("/api/orders", json=payload)

    assert resp.status_code == 400
    assert resp.json()["field"] == field
    assert count_rows(models.Order) == 0


def test_order_total_beyond_integer_range_is_rejected(client, make_product, order_payload, count_rows):
    ketchup = make_product(price=250)

    resp = client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 10_000_000}])
    )

    assert resp.status_code == 400
    assert resp.json() == {"message": "Order total is too large", "field": "items"}
    assert count_rows(models.Order) == 0
    assert count_rows(models.OrderItem) == 0


def test_blank_email_is_treated_as_missing(client, make_product, order_payload):
    ketchup = make_product()
    payload = order_payload([{"productId": ketchup.id, "quantity": 1}])
    payload["customerEmail"] = ""

    resp = client.post("/api/orders", json=payload)

    assert resp.status_code == 201
    assert resp.json()["customerEmail"] is None


def test_storage_failure_leaves_no_rows(client, make_product, order_payload, count_rows, monkeypatch):
    ketchup = make_product()

    def broken_flush(self, objects=None):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(Session, "flush", broken_flush)
    resp = client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    )
    monkeypatch.undo()

    assert resp.status_code == 500
    assert resp.json() == {"message": "Failed to create order"}
    assert count_rows(models.Order) == 0
    assert count_rows(models.OrderItem) == 0


def test_notification_failure_does_not_affect_order(client, make_product, order_payload, count_rows, monkeypatch):
    ketchup = make_product()

    def boom(order):
        raise RuntimeError("mail server down")

    monkeypatch.setattr(notifications, "format_order_email", boom)
    resp = client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    )

    assert resp.status_code == 201
    assert count_rows(models.Order) == 1


def test_notification_is_sent_for_new_order(client, make_product, order_payload, monkeypatch):
    ketchup = make_product()
    sent = []
    monkeypatch.setattr(notifications, "notify_order_placed", sent.append)

    resp = client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 2}])
    )

    assert len(sent) == 1
    assert sent[0].id == resp.json()["id"]
    assert sent[0].total_amount == 500


def test_snapshot_price_survives_price_change(admin_client, make_product, order_payload):
    ketchup = make_product(price=250)
    order_id = admin_client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    ).json()["id"]

    admin_client.put(f"/api/products/{ketchup.id}", json={"price": 999})
    detail = admin_client.get(f"/api/orders/{order_id}").json()

    assert detail["totalAmount"] == 250
    assert detail["items"][0]["price"] == 250
    assert detail["items"][0]["product"]["price"] == 999


def test_list_orders_requires_login(client):
    resp = client.get("/api/orders")

    assert resp.status_code == 401
    assert resp.json() == {"message": "Unauthorized"}


def test_get_order_requires_login(client):
    assert client.get("/api/orders/1").status_code == 401


def test_list_orders_newest_first(admin_client, make_product, order_payload):
    ketchup = make_product()
    first = admin_client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    ).json()
    second = admin_client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 2}])
    ).json()

    resp = admin_client.get("/api/orders")

    assert resp.status_code == 200
    assert [order["id"] for order in resp.json()] == [second["id"], first["id"]]
    assert "items" not in resp.json()[0]


def test_order_detail_includes_products(admin_client, make_product, order_payload):
    ketchup = make_product(name="Ketchup")
    order_id = admin_client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    ).json()["id"]

    first = admin_client.get(f"/api/orders/{order_id}")
    second = admin_client.get(f"/api/orders/{order_id}")

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["items"][0]["product"]["name"] == "Ketchup"
    assert first.json()["customerAddress"] == "12 Mall Road, Lahore"


def test_order_detail_after_product_deleted(admin_client, make_product, order_payload):
    ketchup = make_product()
    order_id = admin_client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    ).json()["id"]
    admin_client.delete(f"/api/products/{ketchup.id}")

    detail = admin_client.get(f"/api/orders/{order_id}").json()

    assert detail["items"][0]["product"] is None
    assert detail["items"][0]["price"] == 250


def test_get_missing_order_returns_404(admin_client):
    resp = admin_client.get("/api/orders/999")

    assert resp.status_code == 404
    assert resp.json() == {"message": "Order not found"}


def test_update_order_status(admin_client, make_product, order_payload):
    ketchup = make_product()
    order_id = admin_client.post(
        "/api/orders", json=order_payload([{"productId": ketchup.id, "quantity": 1}])
    ).json()["id"]

    resp = admin_client.patch(f"/api/orders/{order_id}/status", json={"status": "completed"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert admin_client.get(f"/api/orders/{order_id}").json()["status"] == "completed"


def test_update_order_status_rejects_unknown_status(admin_client):
    resp = admin_client.patch("/api/orders/1/status", json={"status": "shipped"})

    assert resp.status_code == 400
    assert resp.json()["field"] == "status"


def test_format_order_email():
    from storefront.schemas import OrderWithItemsOut

    order = OrderWithItemsOut(
        id=7,
        customer_name="Ayesha Khan",
        customer_address="12 Mall Road, Lahore",
        customer_phone="0300",
        customer_email=None,
        total_amount=750,
        status="pending",
        created_at="2024-01-01T00:00:00",
        items=[{"id": 1, "order_id": 7, "product_id": 3, "quantity": 3, "price": 250}],
    )

    subject, body = notifications.format_order_email(order)

    assert subject == "New Order #7"
    assert "- Product ID 3 x 3 @ 2.50" in body
    assert body.endswith("Total: 7.50")
