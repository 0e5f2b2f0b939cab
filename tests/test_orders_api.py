import pytest

from storefront import models
from storefront.domain.access.capabilities import EmployeePermissions

from conftest import customer_headers, make_customer, make_employee, make_order, staff_headers


@pytest.fixture
def clerk(db):
    return make_employee(db, models.UserRole.employee, EmployeePermissions(change_order_status=True))


@pytest.fixture
def motoboy(db):
    return make_employee(db, models.UserRole.motoboy)


def _stored_status(db, order_id):
    db.expire_all()
    return db.get(models.Order, order_id).status


def test_employee_moves_received_to_preparing(client, db, customer, clerk):
    order = make_order(db, customer)
    res = client.patch(f"/orders/{order.id}/status", json={"status": "preparing"}, headers=staff_headers(clerk))
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "preparing"
    assert body["status_text"] == "Em produção"
    assert body["notifications"] == [
        {
            "kind": "success",
            "title": "Status atualizado",
            "description": f'Pedido #{order.id[:8]} atualizado para "Em preparação".',
        }
    ]
    assert _stored_status(db, order.id) == "preparing"


def test_illegal_transition_is_rejected_with_one_notification(client, db, customer, clerk):
    order = make_order(db, customer, status="delivering")
    res = client.patch(f"/orders/{order.id}/status", json={"status": "completed"}, headers=staff_headers(clerk))
    assert res.status_code == 403
    notifications = res.json()["detail"]["notifications"]
    assert len(notifications) == 1
    assert notifications[0]["kind"] == "destructive"
    assert _stored_status(db, order.id) == "delivering"


def test_client_cannot_skip_workflow_steps(client, db, customer, admin_headers):
    order = make_order(db, customer)
    res = client.patch(f"/orders/{order.id}/status", json={"status": "completed"}, headers=admin_headers)
    assert res.status_code == 403
    assert _stored_status(db, order.id) == "received"


def test_motoboy_completes_delivery(client, db, customer, motoboy):
    order = make_order(db, customer, status="delivering")
    res = client.patch(f"/orders/{order.id}/status", json={"status": "completed"}, headers=staff_headers(motoboy))
    assert res.status_code == 200
    assert res.json()["notifications"][0]["description"].endswith('"Entregue".')


def test_admin_sends_delivery_back_to_preparing(client, db, customer, admin_headers):
    order = make_order(db, customer, status="delivering")
    res = client.patch(f"/orders/{order.id}/status", json={"status": "preparing"}, headers=admin_headers)
    assert res.status_code == 200
    assert _stored_status(db, order.id) == "preparing"


def test_employee_without_flag_cannot_change_status(client, db, customer):
    plain = make_employee(db, models.UserRole.employee)
    order = make_order(db, customer)
    res = client.patch(f"/orders/{order.id}/status", json={"status": "preparing"}, headers=staff_headers(plain))
    assert res.status_code == 403
    assert len(res.json()["detail"]["notifications"]) == 1
    assert _stored_status(db, order.id) == "received"


def test_customer_cannot_change_status(client, db, customer):
    order = make_order(db, customer)
    res = client.patch(f"/orders/{order.id}/status", json={"status": "preparing"}, headers=customer_headers(customer))
    assert res.status_code == 403


def test_unknown_order_returns_404_with_notification(client, admin_headers):
    res = client.patch("/orders/does-not-exist/status", json={"status": "preparing"}, headers=admin_headers)
    assert res.status_code == 404
    assert res.json()["detail"]["notifications"][0]["description"] == "Pedido não encontrado."


def test_status_options_depend_on_role(client, db, customer, motoboy, clerk):
    order = make_order(db, customer, status="delivering")
    res = client.get(f"/orders/{order.id}/status-options", headers=staff_headers(motoboy))
    assert res.json() == [{"value": "completed", "label": "Entregue"}]
    res = client.get(f"/orders/{order.id}/status-options", headers=staff_headers(clerk))
    assert res.json() == []


def test_missing_token_is_401(client, db, customer):
    order = make_order(db, customer)
    res = client.patch(f"/orders/{order.id}/status", json={"status": "preparing"})
    assert res.status_code == 401
    notifications = res.json()["detail"]["notifications"]
    assert len(notifications) == 1
    assert notifications[0]["kind"] == "destructive"
    assert _stored_status(db, order.id) == "received"


def test_garbage_token_is_401_with_notification(client, db, customer):
    order = make_order(db, customer)
    res = client.patch(
        f"/orders/{order.id}/status",
        json={"status": "preparing"},
        headers={"Authorization": "Bearer garbage"},
    )
    assert res.status_code == 401
    assert res.json()["detail"]["message"] == "Invalid token"
    assert len(res.json()["detail"]["notifications"]) == 1


def test_token_of_deleted_employee_is_401_with_notification(client, db, customer):
    order = make_order(db, customer)
    gone = make_employee(db, models.UserRole.admin)
    headers = staff_headers(gone)
    db.delete(gone)
    db.commit()
    res = client.patch(f"/orders/{order.id}/status", json={"status": "preparing"}, headers=headers)
    assert res.status_code == 401
    assert len(res.json()["detail"]["notifications"]) == 1


def test_missing_status_is_422_with_notification(client, db, customer, admin_headers):
    order = make_order(db, customer)
    res = client.patch(f"/orders/{order.id}/status", json={}, headers=admin_headers)
    assert res.status_code == 422
    notifications = res.json()["detail"]["notifications"]
    assert [item["kind"] for item in notifications] == ["destructive"]
    assert _stored_status(db, order.id) == "received"


def test_list_orders_filters_by_status_and_customer(client, db, customer, admin_headers):
    other = make_customer(db, email="joao@example.com", name="João Silva")
    make_order(db, customer, status="received")
    canceled = make_order(db, customer, status="canceled")
    make_order(db, other, status="canceled")

    res = client.get("/orders", params={"status": "canceled", "customer": "maria"}, headers=admin_headers)
    assert res.status_code == 200
    assert [item["id"] for item in res.json()] == [canceled.id]
    assert res.json()[0]["status_text"] == "Pedido cancelado"

    assert client.get("/orders", params={"status": "lost"}, headers=admin_headers).status_code == 400


def test_list_orders_requires_view_orders(client, db):
    plain = make_employee(db, models.UserRole.employee)
    assert client.get("/orders", headers=staff_headers(plain)).status_code == 403


def test_order_detail_for_owner_and_strangers(client, db, customer):
    order = make_order(db, customer, payment_method=models.PaymentMethod.cartao)
    res = client.get(f"/orders/{order.id}", headers=customer_headers(customer))
    assert res.status_code == 200
    assert res.json()["payment_method_label"] == "Cartão"
    assert res.json()["status_text"] == "Pedido recebido"

    stranger = make_customer(db)
    assert client.get(f"/orders/{order.id}", headers=customer_headers(stranger)).status_code == 404


def test_my_orders_lists_only_own(client, db, customer):
    mine = make_order(db, customer)
    make_order(db, make_customer(db))
    res = client.get("/orders/mine", headers=customer_headers(customer))
    assert [item["id"] for item in res.json()] == [mine.id]
