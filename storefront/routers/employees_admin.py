import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import Actor, require_action
from storefront.db import get_db
from storefront.domain.access.capabilities import Action, EmployeePermissions, dump_permissions, load_permissions
from storefront.observability import log_event
from storefront.security import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/employees", tags=["admin-employees"])

REGISTRATION_PREFIX = "MC-"


def _employee_out(employee: models.Employee) -> schemas.EmployeeOut:
    return schemas.EmployeeOut(
        id=employee.id,
        name=employee.name,
        username=employee.username,
        role=employee.role.value,
        registration_number=employee.registration_number,
        cpf=employee.cpf,
        phone=employee.phone,
        birth_date=employee.birth_date,
        pix_key=employee.pix_key,
        permissions=load_permissions(employee.permissions).to_mapping(),
        first_login=employee.first_login,
    )


def _permissions_from(payload: schemas.EmployeePermissionsIn) -> EmployeePermissions:
    return EmployeePermissions(**payload.model_dump())


def _digits(value: str | None) -> str | None:
    if value is None:
        return None
    digits = "".join(ch for ch in value if ch.isdigit())
    return digits or None


def next_registration_number(db: Session) -> str:
    rows = (
        db.query(models.Employee.registration_number)
        .filter(models.Employee.registration_number.like(f"{REGISTRATION_PREFIX}%"))
        .all()
    )
    highest = 0
    for (value,) in rows:
        suffix = value[len(REGISTRATION_PREFIX):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{REGISTRATION_PREFIX}{highest + 1:04d}"


def _ensure_username_available(db: Session, username: str, exclude_id: str | None = None) -> None:
    query = db.query(models.Employee).filter(models.Employee.username == username)
    if exclude_id:
        query = query.filter(models.Employee.id != exclude_id)
    if query.first():
        raise HTTPException(409, "Nome de usuário já está em uso")


def _get_employee_or_404(db: Session, employee_id: str) -> models.Employee:
    employee = db.get(models.Employee, employee_id)
    if not employee:
        raise HTTPException(404, "Funcionário não encontrado")
    return employee


@router.get("", response_model=list[schemas.EmployeeOut])
def list_employees(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_employees)),
):
    employees = db.query(models.Employee).order_by(models.Employee.name.asc()).all()
    return [_employee_out(employee) for employee in employees]


@router.post("", response_model=schemas.EmployeeOut, status_code=201)
def create_employee(
    payload: schemas.EmployeeCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_employees)),
):
    username = payload.username.strip()
    _ensure_username_available(db, username)
    employee = models.Employee(
        id=str(uuid.uuid4()),
        name=payload.name.strip(),
        username=username,
        password_hash=hash_password(payload.password),
        registration_number=(payload.registration_number or "").strip() or next_registration_number(db),
        role=models.UserRole(payload.role),
        cpf=_digits(payload.cpf),
        phone=_digits(payload.phone),
        birth_date=payload.birth_date,
        pix_key=(payload.pix_key or "").strip() or None,
        permissions=dump_permissions(_permissions_from(payload.permissions)),
        first_login=True,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    log_event(logger, "employee_created", employee_id=employee.id, role=employee.role.value, actor_id=actor.id)
    return _employee_out(employee)


@router.patch("/{employee_id}", response_model=schemas.EmployeeOut)
def update_employee(
    employee_id: str,
    payload: schemas.EmployeeUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_employees)),
):
    employee = _get_employee_or_404(db, employee_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("username") is not None:
        username = data["username"].strip()
        _ensure_username_available(db, username, exclude_id=employee.id)
        employee.username = username
    if data.get("name") is not None:
        employee.name = data["name"].strip()
    if data.get("password") is not None:
        employee.password_hash = hash_password(data["password"])
        employee.first_login = True
    if data.get("role") is not None:
        if employee.id == actor.id and data["role"] != models.UserRole.admin.value:
            raise HTTPException(400, "Você não pode remover seu próprio acesso de administrador")
        employee.role = models.UserRole(data["role"])
    if "cpf" in data:
        employee.cpf = _digits(data["cpf"])
    if "phone" in data:
        employee.phone = _digits(data["phone"])
    if "birth_date" in data:
        employee.birth_date = data["birth_date"]
    if "pix_key" in data:
        employee.pix_key = (data["pix_key"] or "").strip() or None
    if payload.permissions is not None:
        employee.permissions = dump_permissions(_permissions_from(payload.permissions))
    db.commit()
    db.refresh(employee)
    log_event(logger, "employee_updated", employee_id=employee.id, actor_id=actor.id, fields=sorted(data.keys()))
    return _employee_out(employee)


@router.delete("/{employee_id}", status_code=204)
def delete_employee(
    employee_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_employees)),
):
    if employee_id == actor.id:
        raise HTTPException(400, "Você não pode excluir sua própria conta")
    employee = _get_employee_or_404(db, employee_id)
    db.delete(employee)
    db.commit()
    log_event(logger, "employee_deleted", employee_id=employee_id, actor_id=actor.id)
