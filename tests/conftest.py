import json
import os
import uuid

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_SECRET"] = "test-secret-for-storefront-suite-0123456789"

import pytest
from fastapi.testclient import TestClient

from storefront import models
from storefront.auth.dependencies import ACTOR_KIND_CUSTOMER, ACTOR_KIND_STAFF
from storefront.db import Base, SessionLocal, engine
from storefront.domain.access.capabilities import EmployeePermissions, dump_permissions
from storefront.main import app
from storefront.security import create_access_token, hash_password

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def make_employee(
    db,
    role: models.UserRole = models.UserRole.employee,
    permissions: EmployeePermissions | None = None,
    username: str | None = None,
) -> models.Employee:
    employee = models.Employee(
        id=str(uuid.uuid4()),
        name=f"{role.value.title()} Teste",
        username=username or f"{role.value}-{uuid.uuid4().hex[:6]}",
        password_hash=PASSWORD_HASH,
        registration_number="MC-0001",
        role=role,
        permissions=dump_permissions(permissions or EmployeePermissions()),
        first_login=True,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def make_customer(db, email: str | None = None, name: str = "Maria Cliente") -> models.Customer:
    customer = models.Customer(
        id=str(uuid.uuid4()),
        name=name,
        email=email or f"cliente-{uuid.uuid4().hex[:6]}@example.com",
        password_hash=PASSWORD_HASH,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def staff_headers(employee: models.Employee) -> dict:
    token = create_access_token({"sub": employee.id, "role": employee.role.value, "kind": ACTOR_KIND_STAFF})
    return auth_header(token)


def customer_headers(customer: models.Customer) -> dict:
    token = create_access_token(
        {"sub": customer.id, "role": models.UserRole.customer.value, "kind": ACTOR_KIND_CUSTOMER}
    )
    return auth_header(token)


def make_product(
    db,
    name: str = "X-Burger",
    price_cents: int = 2500,
    promotion_price_cents: int | None = None,
    is_out_of_stock: bool = False,
    extras: list[dict] | None = None,
    category: models.ProductCategory = models.ProductCategory.lanche,
) -> models.Product:
    product = models.Product(
        id=str(uuid.uuid4()),
        name=name,
        description="",
        price_cents=price_cents,
        promotion_price_cents=promotion_price_cents,
        image_url="",
        category=category,
        is_out_of_stock=is_out_of_stock,
        extras=json.dumps(extras) if extras else None,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_order(
    db,
    customer: models.Customer,
    status: str = "received",
    total_cents: int = 3000,
    payment_method: models.PaymentMethod = models.PaymentMethod.pix,
) -> models.Order:
    order = models.Order(
        id=str(uuid.uuid4()),
        customer_id=customer.id,
        status=status,
        payment_method=payment_method,
        subtotal_cents=total_cents,
        delivery_fee_cents=0,
        total_cents=total_cents,
        pickup=True,
        address=json.dumps({"pickup": True}),
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


@pytest.fixture
def admin(db):
    return make_employee(db, models.UserRole.admin, username="admin")


@pytest.fixture
def admin_headers(admin):
    return staff_headers(admin)


@pytest.fixture
def customer(db):
    return make_customer(db, email="maria@example.com")
