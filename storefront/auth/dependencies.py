from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, Header, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from storefront import models
from storefront.db import get_db
from storefront.domain.access.capabilities import Action, EmployeePermissions, allowed_actions, load_permissions
from storefront.domain.core.enums import STAFF_ROLES
from storefront.security import decode_access_token

ACTOR_KIND_STAFF = "staff"
ACTOR_KIND_CUSTOMER = "customer"


class TokenData(BaseModel):
    sub: str
    role: str
    kind: str


@dataclass(frozen=True, slots=True)
class Actor:
    id: str
    name: str
    role: models.UserRole
    permissions: EmployeePermissions
    actions: frozenset[Action]

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def can(self, action: Action) -> bool:
        return action in self.actions


def _extract_token(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


def _decode_token(token: str) -> TokenData:
    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    sub = payload.get("sub")
    role = payload.get("role")
    kind = payload.get("kind")
    if not sub or not role or kind not in {ACTOR_KIND_STAFF, ACTOR_KIND_CUSTOMER}:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return TokenData(sub=sub, role=role, kind=kind)


def _load_actor(db: Session, token_data: TokenData) -> Actor:
    if token_data.kind == ACTOR_KIND_CUSTOMER:
        customer = db.query(models.Customer).filter(models.Customer.id == token_data.sub).first()
        if not customer:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
        permissions = EmployeePermissions()
        role = models.UserRole.customer
        return Actor(
            id=customer.id,
            name=customer.name,
            role=role,
            permissions=permissions,
            actions=allowed_actions(role, permissions),
        )

    employee = db.query(models.Employee).filter(models.Employee.id == token_data.sub).first()
    if not employee:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    # role and permission flags come from the stored record so revocations apply immediately
    permissions = load_permissions(employee.permissions)
    return Actor(
        id=employee.id,
        name=employee.name,
        role=employee.role,
        permissions=permissions,
        actions=allowed_actions(employee.role, permissions),
    )


def authenticate(request: Request, db: Session, authorization: str | None) -> Actor:
    """Resolve the Authorization header to an Actor, raising 401 when it cannot."""
    token = _extract_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing credentials")
    actor = _load_actor(db, _decode_token(token))
    request.state.actor_role = actor.role.value
    return actor


def get_current_actor(
    request: Request,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Actor:
    return authenticate(request, db, authorization)


def require_roles(*roles: models.UserRole) -> Callable[[Actor], Actor]:
    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        return actor

    return dependency


def require_action(action: Action) -> Callable[[Actor], Actor]:
    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.can(action):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        return actor

    return dependency
