from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import Actor, require_roles
from storefront.db import get_db
from storefront.notifications import RequestNotifier, get_notifier, with_notifications
from storefront.services.checkout import place_order, preview_order

router = APIRouter(prefix="/checkout", tags=["checkout"])

require_customer = require_roles(models.UserRole.customer)


def _checkout_failed(exc: HTTPException, notifier: RequestNotifier) -> HTTPException:
    notifier.notify("destructive", "Não foi possível finalizar o pedido", str(exc.detail))
    return with_notifications(exc, notifier)


@router.post("/preview", response_model=schemas.CheckoutPreviewOut)
def checkout_preview(
    payload: schemas.CheckoutIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_customer),
    notifier: RequestNotifier = Depends(get_notifier),
):
    try:
        return preview_order(db, actor, payload)
    except HTTPException as exc:
        raise _checkout_failed(exc, notifier) from exc


@router.post("", response_model=schemas.CheckoutOut, status_code=201)
def checkout(
    payload: schemas.CheckoutIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_customer),
    notifier: RequestNotifier = Depends(get_notifier),
):
    try:
        order = place_order(db, actor, payload, notifier)
    except HTTPException as exc:
        raise _checkout_failed(exc, notifier) from exc
    return schemas.CheckoutOut(
        order_id=order.id,
        status=order.status,
        subtotal_cents=order.subtotal_cents,
        delivery_fee_cents=order.delivery_fee_cents,
        total_cents=order.total_cents,
        notifications=notifier.dump(),
    )
