import pytest

from storefront import models

from conftest import customer_headers, make_product


@pytest.fixture
def headers(customer):
    return customer_headers(customer)


@pytest.fixture
def address_id(client, headers):
    res = client.post(
        "/customers/me/addresses",
        json={
            "street": "Rua das Flores",
            "number": "42",
            "neighborhood": "Centro",
            "city": "Campinas",
            "state": "sp",
            "zip_code": "13010-000",
        },
        headers=headers,
    )
    assert res.status_code == 201
    return res.json()["id"]


@pytest.fixture
def tiered_store(client, admin_headers):
    res = client.put(
        "/admin/settings/delivery-tiers",
        json=[
            {"min_distance": 0, "max_distance": 3, "fee_cents": 500},
            {"min_distance": 3, "max_distance": 6, "fee_cents": 800},
        ],
        headers=admin_headers,
    )
    assert res.status_code == 200


def test_pickup_totals_include_extras_per_unit(client, db, headers):
    burger = make_product(
        db,
        price_cents=2500,
        extras=[{"id": "bacon", "name": "Bacon", "price_cents": 400}],
    )
    payload = {
        "items": [{"product_id": burger.id, "quantity": 2, "extra_ids": ["bacon"]}],
        "pickup": True,
        "payment_method": "pix",
    }
    res = client.post("/checkout/preview", json=payload, headers=headers)
    assert res.status_code == 200
    assert res.json() == {"subtotal_cents": 5800, "delivery_fee_cents": 0, "total_cents": 5800}


def test_promotion_price_is_charged(client, db, headers):
    product = make_product(db, price_cents=2000, promotion_price_cents=1500)
    payload = {"items": [{"product_id": product.id, "quantity": 1}], "pickup": True}
    assert client.post("/checkout/preview", json=payload, headers=headers).json()["subtotal_cents"] == 1500


def test_delivery_fee_follows_tier(client, db, headers, address_id, tiered_store):
    product = make_product(db, price_cents=1000)
    payload = {
        "items": [{"product_id": product.id, "quantity": 1}],
        "address_id": address_id,
        "distance_km": 4.2,
    }
    res = client.post("/checkout/preview", json=payload, headers=headers)
    assert res.json()["delivery_fee_cents"] == 800
    assert res.json()["total_cents"] == 1800


def test_distance_beyond_last_tier_is_rejected(client, db, headers, address_id, tiered_store):
    product = make_product(db)
    payload = {
        "items": [{"product_id": product.id, "quantity": 1}],
        "address_id": address_id,
        "distance_km": 12,
    }
    res = client.post("/checkout/preview", json=payload, headers=headers)
    assert res.status_code == 400
    assert len(res.json()["detail"]["notifications"]) == 1


def test_flat_fee_without_distance(client, db, headers, address_id):
    product = make_product(db, price_cents=1000)
    payload = {"items": [{"product_id": product.id, "quantity": 1}], "address_id": address_id}
    assert client.post("/checkout/preview", json=payload, headers=headers).json()["delivery_fee_cents"] == 500


def test_free_shipping_radius(client, db, headers, address_id, admin_headers):
    client.patch("/admin/settings", json={"free_shipping_radius_km": 2}, headers=admin_headers)
    product = make_product(db, price_cents=1000)
    payload = {
        "items": [{"product_id": product.id, "quantity": 1}],
        "address_id": address_id,
        "distance_km": 1.5,
    }
    assert client.post("/checkout/preview", json=payload, headers=headers).json()["delivery_fee_cents"] == 0


def test_delivery_requires_address(client, db, headers):
    product = make_product(db)
    payload = {"items": [{"product_id": product.id, "quantity": 1}]}
    assert client.post("/checkout/preview", json=payload, headers=headers).status_code == 400


def test_out_of_stock_product_is_rejected(client, db, headers):
    product = make_product(db, is_out_of_stock=True)
    payload = {"items": [{"product_id": product.id, "quantity": 1}], "pickup": True}
    res = client.post("/checkout", json=payload, headers=headers)
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["message"] == "Produto esgotado: X-Burger"
    assert [item["kind"] for item in detail["notifications"]] == ["destructive"]
    assert db.query(models.Order).count() == 0


def test_unknown_extra_is_rejected(client, db, headers):
    product = make_product(db)
    payload = {"items": [{"product_id": product.id, "quantity": 1, "extra_ids": ["queijo"]}], "pickup": True}
    assert client.post("/checkout", json=payload, headers=headers).status_code == 400


def test_empty_cart_is_rejected(client, headers):
    res = client.post("/checkout", json={"items": [], "pickup": True}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"]["notifications"][0]["description"] == "Carrinho vazio"


def test_place_order_creates_received_order(client, db, customer, headers):
    product = make_product(db, name="Suco", price_cents=700)
    payload = {
        "items": [{"product_id": product.id, "quantity": 3}],
        "pickup": True,
        "payment_method": "dinheiro",
        "observations": "  sem gelo ",
    }
    res = client.post("/checkout", json=payload, headers=headers)
    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "received"
    assert body["total_cents"] == 2100
    assert body["notifications"][0]["title"] == "Pedido realizado"

    order = db.get(models.Order, body["order_id"])
    assert order.customer_id == customer.id
    assert order.observations == "sem gelo"
    assert [(item.product_name, item.quantity) for item in order.items] == [("Suco", 3)]

    detail = client.get(f"/orders/{order.id}", headers=headers).json()
    assert detail["payment_method_label"] == "Dinheiro"
    assert detail["address"] == {"pickup": True}


def test_staff_cannot_checkout(client, db, admin_headers):
    product = make_product(db)
    payload = {"items": [{"product_id": product.id, "quantity": 1}], "pickup": True}
    assert client.post("/checkout", json=payload, headers=admin_headers).status_code == 403
