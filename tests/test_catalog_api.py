from storefront import models
from storefront.domain.access.capabilities import EmployeePermissions

from conftest import make_employee, make_product, staff_headers


def test_public_listing_orders_by_category_and_name(client, db):
    make_product(db, name="Suco", category=models.ProductCategory.bebida)
    make_product(db, name="X-Salada", category=models.ProductCategory.lanche)
    make_product(db, name="Água", category=models.ProductCategory.bebida, is_out_of_stock=True)

    names = [item["name"] for item in client.get("/catalog/products").json()]
    assert names == ["Suco", "Água", "X-Salada"]

    in_stock = client.get("/catalog/products", params={"include_out_of_stock": False}).json()
    assert "Água" not in [item["name"] for item in in_stock]

    drinks = client.get("/catalog/products", params={"category": "bebida"}).json()
    assert {item["category"] for item in drinks} == {"bebida"}


def test_check_reports_missing_and_out_of_stock(client, db):
    ok = make_product(db, name="Ok")
    sold_out = make_product(db, name="Esgotado", is_out_of_stock=True)
    res = client.post("/catalog/products/check", json={"product_ids": [ok.id, sold_out.id, "gone"]})
    assert res.json() == {"missing": ["gone"], "out_of_stock": [sold_out.id]}


def test_admin_creates_product_with_extras(client, admin_headers):
    res = client.post(
        "/admin/products",
        json={
            "name": "X-Tudo",
            "price_cents": 3200,
            "category": "lanche",
            "extras": [{"name": "Bacon", "price_cents": 400}],
        },
        headers=admin_headers,
    )
    assert res.status_code == 201
    body = res.json()
    assert body["effective_price_cents"] == 3200
    assert body["extras"][0]["name"] == "Bacon"
    assert client.get(f"/catalog/products/{body['id']}").status_code == 200


def test_stock_flag_requires_manage_stock(client, db):
    product = make_product(db)
    stock_clerk = make_employee(db, models.UserRole.employee, EmployeePermissions(manage_stock=True))
    plain = make_employee(db, models.UserRole.employee)

    res = client.patch(
        f"/admin/products/{product.id}/stock",
        json={"is_out_of_stock": True},
        headers=staff_headers(stock_clerk),
    )
    assert res.status_code == 200
    assert res.json()["is_out_of_stock"] is True

    res = client.patch(
        f"/admin/products/{product.id}/stock",
        json={"is_out_of_stock": False},
        headers=staff_headers(plain),
    )
    assert res.status_code == 403


def test_promotion_must_be_below_price(client, db):
    product = make_product(db, price_cents=2000)
    promoter = make_employee(db, models.UserRole.employee, EmployeePermissions(promotion_products=True))
    headers = staff_headers(promoter)

    bad = client.patch(f"/admin/products/{product.id}/promotion", json={"promotion_price_cents": 2000}, headers=headers)
    assert bad.status_code == 400

    good = client.patch(f"/admin/products/{product.id}/promotion", json={"promotion_price_cents": 1500}, headers=headers)
    assert good.json()["effective_price_cents"] == 1500

    cleared = client.patch(f"/admin/products/{product.id}/promotion", json={"promotion_price_cents": None}, headers=headers)
    assert cleared.json()["effective_price_cents"] == 2000


def test_promoter_cannot_create_products(client, db):
    promoter = make_employee(db, models.UserRole.employee, EmployeePermissions(promotion_products=True))
    res = client.post(
        "/admin/products",
        json={"name": "Nope", "price_cents": 100},
        headers=staff_headers(promoter),
    )
    assert res.status_code == 403


def test_delete_product(client, db, admin_headers):
    product = make_product(db)
    assert client.delete(f"/admin/products/{product.id}", headers=admin_headers).status_code == 204
    assert client.get(f"/catalog/products/{product.id}").status_code == 404
