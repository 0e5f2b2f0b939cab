import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import ACTOR_KIND_CUSTOMER, ACTOR_KIND_STAFF, Actor, get_current_actor
from storefront.db import get_db, settings
from storefront.domain.access.capabilities import load_permissions, menu_for
from storefront.observability import log_event
from storefront.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Credenciais inválidas"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _token_response(
    *,
    user_id: str,
    name: str,
    role: models.UserRole,
    kind: str,
    permissions: dict[str, bool],
    first_login: bool = False,
) -> schemas.TokenOut:
    expires_minutes = settings.access_token_expire_minutes
    token = create_access_token(
        {
            "sub": user_id,
            "role": role.value,
            "kind": kind,
            "permissions": permissions,
        },
        expires_minutes=expires_minutes,
    )
    return schemas.TokenOut(
        access_token=token,
        user_id=user_id,
        name=name,
        role=role.value,
        permissions=permissions,
        first_login=first_login,
        expires_in_seconds=expires_minutes * 60,
    )


@router.post("/login", response_model=schemas.TokenOut)
def login(payload: schemas.LoginIn, db: Session = Depends(get_db)):
    if payload.credential_type == "username":
        employee = (
            db.query(models.Employee)
            .filter(models.Employee.username == payload.credential.strip())
            .first()
        )
        if not employee or not verify_password(payload.password, employee.password_hash):
            log_event(logger, "login_failed", level=logging.WARNING, credential_type="username")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
        log_event(logger, "login", actor_id=employee.id, role=employee.role.value)
        return _token_response(
            user_id=employee.id,
            name=employee.name,
            role=employee.role,
            kind=ACTOR_KIND_STAFF,
            permissions=load_permissions(employee.permissions).to_mapping(),
            first_login=employee.first_login,
        )

    customer = (
        db.query(models.Customer)
        .filter(models.Customer.email == _normalize_email(payload.credential))
        .first()
    )
    if not customer or not verify_password(payload.password, customer.password_hash):
        log_event(logger, "login_failed", level=logging.WARNING, credential_type="email")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
    log_event(logger, "login", actor_id=customer.id, role=models.UserRole.customer.value)
    return _token_response(
        user_id=customer.id,
        name=customer.name,
        role=models.UserRole.customer,
        kind=ACTOR_KIND_CUSTOMER,
        permissions={},
    )


@router.post("/register", response_model=schemas.TokenOut, status_code=201)
def register(payload: schemas.RegisterIn, db: Session = Depends(get_db)):
    email = _normalize_email(payload.email)
    if db.query(models.Customer).filter(models.Customer.email == email).first():
        raise HTTPException(status_code=409, detail="E-mail já cadastrado")
    customer = models.Customer(
        id=str(uuid.uuid4()),
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    log_event(logger, "customer_registered", customer_id=customer.id)
    return _token_response(
        user_id=customer.id,
        name=customer.name,
        role=models.UserRole.customer,
        kind=ACTOR_KIND_CUSTOMER,
        permissions={},
    )


@router.post("/password", status_code=204)
def change_password(
    payload: schemas.PasswordChangeIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    if actor.is_staff:
        record = db.get(models.Employee, actor.id)
    else:
        record = db.get(models.Customer, actor.id)
    if not record or not verify_password(payload.old_password, record.password_hash):
        raise HTTPException(status_code=400, detail="Senha atual incorreta")
    record.password_hash = hash_password(payload.new_password)
    if actor.is_staff:
        record.first_login = False
    db.commit()
    log_event(logger, "password_changed", actor_id=actor.id, role=actor.role.value)


@router.get("/me", response_model=schemas.MeOut)
def me(actor: Actor = Depends(get_current_actor)):
    return schemas.MeOut(
        id=actor.id,
        name=actor.name,
        role=actor.role.value,
        permissions=actor.permissions.to_mapping() if actor.is_staff else {},
        actions=sorted(action.value for action in actor.actions),
    )


@router.get("/menu", response_model=list[schemas.MenuItemOut])
def menu(actor: Actor = Depends(get_current_actor)):
    return [
        schemas.MenuItemOut(name=item.name, path=item.path)
        for item in menu_for(actor.role, actor.permissions)
    ]
