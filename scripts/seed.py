import os
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront import models
from storefront.db import SessionLocal
from storefront.domain.access.capabilities import EmployeePermissions, dump_permissions
from storefront.domain.catalog.extras import dump_extras
from storefront.security import hash_password
from storefront.services.store_settings import initialize_store_settings


def uid() -> str:
    return str(uuid.uuid4())


def get_or_create_product(
    db: Session,
    name: str,
    price_cents: int,
    category: models.ProductCategory,
    description: str = "",
    extras: list[dict] | None = None,
) -> models.Product:
    product = db.scalar(select(models.Product).where(models.Product.name == name))
    if product:
        product.price_cents = price_cents
        product.category = category
        product.description = description
        if extras is not None:
            product.extras = dump_extras(extras)
        return product
    product = models.Product(
        id=uid(),
        name=name,
        description=description,
        price_cents=price_cents,
        category=category,
        extras=dump_extras(extras or []),
    )
    db.add(product)
    return product


def ensure_employee(
    db: Session,
    username: str,
    name: str,
    password: str,
    role: models.UserRole,
    registration_number: str,
    permissions: EmployeePermissions | None = None,
) -> models.Employee:
    employee = db.scalar(select(models.Employee).where(models.Employee.username == username))
    if employee:
        employee.name = name
        employee.role = role
        if permissions is not None:
            employee.permissions = dump_permissions(permissions)
        return employee
    employee = models.Employee(
        id=uid(),
        name=name,
        username=username,
        password_hash=hash_password(password),
        registration_number=registration_number,
        role=role,
        permissions=dump_permissions(permissions or EmployeePermissions()),
        first_login=True,
    )
    db.add(employee)
    return employee


def main() -> None:
    db: Session = SessionLocal()
    try:
        initialize_store_settings(db)

        ensure_employee(
            db,
            username=os.getenv("SEED_ADMIN_USERNAME", "admin"),
            name="Administrador",
            password=os.getenv("SEED_ADMIN_PASSWORD", "admin123"),
            role=models.UserRole.admin,
            registration_number="MC-0001",
        )
        ensure_employee(
            db,
            username="atendente",
            name="Atendente",
            password=os.getenv("SEED_EMPLOYEE_PASSWORD", "atendente123"),
            role=models.UserRole.employee,
            registration_number="MC-0002",
            permissions=EmployeePermissions(change_order_status=True, manage_stock=True),
        )
        ensure_employee(
            db,
            username="motoboy",
            name="Motoboy",
            password=os.getenv("SEED_MOTOBOY_PASSWORD", "motoboy123"),
            role=models.UserRole.motoboy,
            registration_number="MC-0003",
        )

        get_or_create_product(
            db,
            "X-Burger",
            2500,
            models.ProductCategory.lanche,
            description="Pão, hambúrguer, queijo e salada",
            extras=[
                {"id": "bacon", "name": "Bacon", "price_cents": 400},
                {"id": "ovo", "name": "Ovo", "price_cents": 200},
            ],
        )
        get_or_create_product(db, "Prato feito", 3200, models.ProductCategory.refeicao, description="Arroz, feijão, bife e salada")
        get_or_create_product(db, "Refrigerante lata", 600, models.ProductCategory.bebida)
        get_or_create_product(db, "Pudim", 900, models.ProductCategory.sobremesa)

        db.commit()
        print("Seed concluído.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
