import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import Actor, require_roles
from storefront.db import get_db

router = APIRouter(prefix="/customers/me", tags=["customers"])

require_customer = require_roles(models.UserRole.customer)


def _normalize_postal_code(value: str) -> str:
    digits = "".join(ch for ch in value if ch.isdigit())
    if len(digits) != 8:
        raise HTTPException(400, "CEP inválido")
    return digits


@router.get("/addresses", response_model=list[schemas.AddressOut])
def list_addresses(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_customer),
):
    return (
        db.query(models.CustomerAddress)
        .filter(models.CustomerAddress.customer_id == actor.id)
        .order_by(models.CustomerAddress.is_default.desc(), models.CustomerAddress.created_at.asc())
        .all()
    )


@router.post("/addresses", response_model=schemas.AddressOut, status_code=201)
def create_address(
    payload: schemas.AddressIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_customer),
):
    has_address = (
        db.query(models.CustomerAddress.id)
        .filter(models.CustomerAddress.customer_id == actor.id)
        .first()
    )
    address = models.CustomerAddress(
        id=str(uuid.uuid4()),
        customer_id=actor.id,
        label=(payload.label or "").strip() or None,
        street=payload.street.strip(),
        number=payload.number.strip(),
        neighborhood=payload.neighborhood.strip(),
        city=payload.city.strip(),
        state=payload.state.strip().upper(),
        zip_code=_normalize_postal_code(payload.zip_code),
        complement=(payload.complement or "").strip() or None,
        is_default=has_address is None,
    )
    db.add(address)
    db.commit()
    db.refresh(address)
    return address


@router.delete("/addresses/{address_id}", status_code=204)
def delete_address(
    address_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_customer),
):
    address = (
        db.query(models.CustomerAddress)
        .filter(
            models.CustomerAddress.id == address_id,
            models.CustomerAddress.customer_id == actor.id,
        )
        .first()
    )
    if not address:
        raise HTTPException(404, "Endereço não encontrado")
    was_default = address.is_default
    db.delete(address)
    db.flush()
    if was_default:
        replacement = (
            db.query(models.CustomerAddress)
            .filter(models.CustomerAddress.customer_id == actor.id)
            .order_by(models.CustomerAddress.created_at.asc())
            .first()
        )
        if replacement:
            replacement.is_default = True
    db.commit()
