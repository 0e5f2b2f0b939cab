from storefront import models

from conftest import make_employee, staff_headers


def _create(client, headers, **overrides):
    payload = {
        "name": "Pedro",
        "username": "pedro",
        "password": "senha123",
        "role": "employee",
        "cpf": "123.456.789-00",
        "permissions": {"changeOrderStatus": True},
    }
    payload.update(overrides)
    return client.post("/admin/employees", json=payload, headers=headers)


def test_create_employee_generates_registration_number(client, admin_headers):
    res = _create(client, admin_headers)
    assert res.status_code == 201
    body = res.json()
    assert body["registration_number"].startswith("MC-")
    assert body["cpf"] == "12345678900"
    assert body["permissions"]["changeOrderStatus"] is True
    assert body["permissions"]["manageStock"] is False
    assert body["first_login"] is True


def test_registration_numbers_increase(client, admin_headers):
    first = _create(client, admin_headers).json()["registration_number"]
    second = _create(client, admin_headers, username="paula").json()["registration_number"]
    assert int(second[3:]) == int(first[3:]) + 1


def test_duplicate_username_conflicts(client, admin_headers):
    _create(client, admin_headers)
    assert _create(client, admin_headers).status_code == 409


def test_short_password_is_rejected(client, admin_headers):
    assert _create(client, admin_headers, password="123").status_code == 422


def test_update_permissions(client, admin_headers):
    employee_id = _create(client, admin_headers).json()["id"]
    res = client.patch(
        f"/admin/employees/{employee_id}",
        json={"permissions": {"manageStock": True}},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["permissions"] == {
        "manageStock": True,
        "viewReports": False,
        "changeOrderStatus": False,
        "exportOrderReportPDF": False,
        "promotionProducts": False,
    }


def test_admin_cannot_delete_self(client, admin, admin_headers):
    assert client.delete(f"/admin/employees/{admin.id}", headers=admin_headers).status_code == 400


def test_delete_employee(client, db, admin_headers):
    employee_id = make_employee(db).id
    assert client.delete(f"/admin/employees/{employee_id}", headers=admin_headers).status_code == 204
    db.expire_all()
    assert db.get(models.Employee, employee_id) is None


def test_only_admin_manages_employees(client, db):
    employee = make_employee(db)
    assert client.get("/admin/employees", headers=staff_headers(employee)).status_code == 403
