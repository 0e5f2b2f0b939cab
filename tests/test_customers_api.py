from conftest import customer_headers

ADDRESS = {
    "street": "Av. Brasil",
    "number": "100",
    "neighborhood": "Jardim",
    "city": "Campinas",
    "state": "SP",
    "zip_code": "13000000",
}


def test_first_address_becomes_default(client, customer):
    headers = customer_headers(customer)
    first = client.post("/customers/me/addresses", json=ADDRESS, headers=headers).json()
    second = client.post("/customers/me/addresses", json={**ADDRESS, "number": "200"}, headers=headers).json()
    assert first["is_default"] is True
    assert second["is_default"] is False


def test_deleting_default_promotes_next(client, customer):
    headers = customer_headers(customer)
    first = client.post("/customers/me/addresses", json=ADDRESS, headers=headers).json()
    second = client.post("/customers/me/addresses", json={**ADDRESS, "number": "200"}, headers=headers).json()
    assert client.delete(f"/customers/me/addresses/{first['id']}", headers=headers).status_code == 204
    remaining = client.get("/customers/me/addresses", headers=headers).json()
    assert [(item["id"], item["is_default"]) for item in remaining] == [(second["id"], True)]


def test_invalid_zip_code(client, customer):
    res = client.post(
        "/customers/me/addresses",
        json={**ADDRESS, "zip_code": "1300-00AB"},
        headers=customer_headers(customer),
    )
    assert res.status_code == 400


def test_staff_has_no_address_book(client, admin_headers):
    assert client.get("/customers/me/addresses", headers=admin_headers).status_code == 403
