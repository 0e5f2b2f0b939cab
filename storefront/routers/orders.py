import json
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Request
from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from storefront import models, schemas
from storefront.auth.dependencies import Actor, authenticate, get_current_actor, require_action, require_roles
from storefront.db import get_db
from storefront.domain.access.capabilities import Action
from storefront.domain.catalog.extras import load_extras
from storefront.domain.order.payment import payment_method_label
from storefront.domain.order.status_policy import status_options, status_text
from storefront.notifications import RequestNotifier, get_notifier, with_notifications
from storefront.services.order_status import apply_status_transition

router = APIRouter(prefix="/orders", tags=["orders"])

STATUS_FILTER_VALUES = {status.value for status in models.OrderStatus}


def _load_address(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def _item_out(item: models.OrderItem) -> schemas.OrderItemOut:
    extras = load_extras(item.extras)
    extras_cents = sum(extra["price_cents"] for extra in extras)
    return schemas.OrderItemOut(
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        unit_price_cents=item.unit_price_cents,
        extras=[schemas.ExtraOut(**extra) for extra in extras],
        line_total_cents=(item.unit_price_cents + extras_cents) * item.quantity,
    )


def order_out(order: models.Order, customer: models.Customer | None) -> schemas.OrderOut:
    return schemas.OrderOut(
        id=order.id,
        customer_id=order.customer_id,
        customer_name=customer.name if customer else None,
        status=order.status,
        status_text=status_text(order.status),
        payment_method=order.payment_method.value,
        payment_method_label=payment_method_label(order.payment_method),
        subtotal_cents=order.subtotal_cents,
        delivery_fee_cents=order.delivery_fee_cents,
        total_cents=order.total_cents,
        pickup=order.pickup,
        address=_load_address(order.address),
        observations=order.observations,
        created_at=order.created_at,
        items=[_item_out(item) for item in order.items],
    )


def _list_item(order: models.Order, customer: models.Customer | None) -> schemas.OrderListItem:
    return schemas.OrderListItem(
        id=order.id,
        customer_name=customer.name if customer else None,
        status=order.status,
        status_text=status_text(order.status),
        payment_method=order.payment_method.value,
        pickup=order.pickup,
        total_cents=order.total_cents,
        created_at=order.created_at,
    )


def _get_order_or_404(db: Session, order_id: str) -> models.Order:
    order = (
        db.query(models.Order)
        .options(selectinload(models.Order.items))
        .filter(models.Order.id == order_id)
        .first()
    )
    if not order:
        raise HTTPException(404, "Pedido não encontrado")
    return order


@router.get("", response_model=list[schemas.OrderListItem])
def list_orders(
    status: str | None = Query(default=None),
    customer: str | None = Query(default=None),
    days: int | None = Query(default=None, ge=1, le=365),
    limit: int = Query(default=50, ge=1, le=200),
    page: int = Query(default=1, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.view_orders)),
):
    query = db.query(models.Order, models.Customer).join(
        models.Customer, models.Customer.id == models.Order.customer_id
    )
    if status:
        if status not in STATUS_FILTER_VALUES:
            raise HTTPException(400, "Status inválido")
        query = query.filter(models.Order.status == status)
    if customer and customer.strip():
        term = f"%{customer.strip()}%"
        query = query.filter(or_(models.Customer.name.ilike(term), models.Customer.email.ilike(term)))
    if days:
        since = datetime.now(timezone.utc) - timedelta(days=days)
        query = query.filter(models.Order.created_at >= since)
    rows = (
        query.order_by(models.Order.created_at.desc(), models.Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [_list_item(order, owner) for order, owner in rows]


@router.get("/mine", response_model=list[schemas.OrderOut])
def my_orders(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(models.UserRole.customer)),
):
    orders = (
        db.query(models.Order)
        .options(selectinload(models.Order.items))
        .filter(models.Order.customer_id == actor.id)
        .order_by(models.Order.created_at.desc())
        .all()
    )
    customer = db.get(models.Customer, actor.id)
    return [order_out(order, customer) for order in orders]


@router.get("/{order_id}", response_model=schemas.OrderOut)
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    order = _get_order_or_404(db, order_id)
    if actor.is_staff:
        if not actor.can(Action.view_orders):
            raise HTTPException(403, "Not enough permissions")
    elif order.customer_id != actor.id:
        raise HTTPException(404, "Pedido não encontrado")
    return order_out(order, db.get(models.Customer, order.customer_id))


@router.get("/{order_id}/status-options", response_model=list[schemas.StatusOptionOut])
def get_status_options(
    order_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.view_orders)),
):
    order = _get_order_or_404(db, order_id)
    if not actor.can(Action.change_order_status):
        return []
    return [
        schemas.StatusOptionOut(value=option.value, label=option.label)
        for option in status_options(order.status, actor.role)
    ]


@router.patch("/{order_id}/status", response_model=schemas.OrderStatusUpdateOut)
def update_order_status(
    order_id: str,
    request: Request,
    body: dict | None = Body(default=None),
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None, alias="Authorization"),
    notifier: RequestNotifier = Depends(get_notifier),
):
    # every outcome, including auth and body errors, carries exactly one notification
    try:
        try:
            actor = authenticate(request, db, authorization)
        except HTTPException:
            notifier.notify("destructive", "Erro", "Sessão expirada. Faça login novamente.")
            raise
        try:
            payload = schemas.OrderStatusUpdate.model_validate(body or {})
        except ValidationError as exc:
            notifier.notify("destructive", "Erro", "Informe o novo status do pedido.")
            raise HTTPException(422, "Status do pedido inválido") from exc
        order = apply_status_transition(
            db,
            order_id=order_id,
            target_status=payload.status,
            actor=actor,
            notifier=notifier,
        )
    except HTTPException as exc:
        raise with_notifications(exc, notifier) from exc
    return schemas.OrderStatusUpdateOut(
        ok=True,
        order_id=order.id,
        status=order.status,
        status_text=status_text(order.status),
        notifications=notifier.dump(),
    )
