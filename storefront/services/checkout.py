"""
Serviço de checkout: cálculo de subtotal, frete e criação do pedido.
O router apenas orquestra (valida request, chama este serviço, devolve notificações).
"""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field

from fastapi import HTTPException
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import Actor
from storefront.domain.catalog.extras import effective_price_cents, load_extras
from storefront.domain.shipping.delivery_tiers import fee_for_distance
from storefront.notifications import Notifier
from storefront.observability import log_event
from storefront.services.store_settings import get_store_settings_or_503, tiers_for

logger = logging.getLogger(__name__)


def _gen_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class PricedItem:
    product: models.Product
    quantity: int
    unit_price_cents: int
    extras: list[dict] = field(default_factory=list)

    @property
    def line_total_cents(self) -> int:
        extras_cents = sum(int(extra["price_cents"]) for extra in self.extras)
        return self.unit_price_cents * self.quantity + extras_cents * self.quantity


@dataclass(slots=True)
class CheckoutQuote:
    items: list[PricedItem]
    subtotal_cents: int
    delivery_fee_cents: int
    address: dict | None

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents + self.delivery_fee_cents


def _resolve_extras(product: models.Product, extra_ids: list[str]) -> list[dict]:
    if not extra_ids:
        return []
    available = {extra["id"]: extra for extra in load_extras(product.extras)}
    selected: list[dict] = []
    seen: set[str] = set()
    for raw in extra_ids:
        extra_id = str(raw or "").strip()
        if not extra_id or extra_id in seen:
            continue
        seen.add(extra_id)
        extra = available.get(extra_id)
        if extra is None:
            raise HTTPException(400, f"Adicional inválido para o produto: {extra_id}")
        selected.append(extra)
    return selected


def _price_items(db: Session, items: list[schemas.CheckoutItemIn]) -> list[PricedItem]:
    priced: list[PricedItem] = []
    for item in items:
        product = db.get(models.Product, item.product_id)
        if not product:
            raise HTTPException(400, f"Produto inválido: {item.product_id}")
        if product.is_out_of_stock:
            raise HTTPException(400, f"Produto esgotado: {product.name}")
        priced.append(
            PricedItem(
                product=product,
                quantity=item.quantity,
                unit_price_cents=effective_price_cents(product.price_cents, product.promotion_price_cents),
                extras=_resolve_extras(product, item.extra_ids),
            )
        )
    return priced


def _address_snapshot(db: Session, customer_id: str, address_id: str | None) -> dict:
    if not address_id:
        raise HTTPException(400, "Endereço obrigatório para entrega")
    address = (
        db.query(models.CustomerAddress)
        .filter(
            models.CustomerAddress.id == address_id,
            models.CustomerAddress.customer_id == customer_id,
        )
        .first()
    )
    if not address:
        raise HTTPException(400, "Endereço inválido")
    return {
        "street": address.street,
        "number": address.number,
        "neighborhood": address.neighborhood,
        "city": address.city,
        "state": address.state,
        "zip_code": address.zip_code,
        "complement": address.complement,
    }


def compute_delivery_fee(
    row: models.StoreSettings,
    *,
    pickup: bool,
    distance_km: float | None,
) -> int:
    if pickup:
        return 0
    radius = float(row.free_shipping_radius_km or 0)
    if distance_km is not None and radius > 0 and distance_km <= radius:
        return 0
    if distance_km is None:
        return int(row.shipping_fee_cents)
    fee = fee_for_distance(tiers_for(row), distance_km)
    if fee is None:
        raise HTTPException(400, "Endereço fora da área de entrega")
    return fee


def quote_order(db: Session, actor: Actor, payload: schemas.CheckoutIn) -> CheckoutQuote:
    if not payload.items:
        raise HTTPException(400, "Carrinho vazio")
    row = get_store_settings_or_503(db)
    priced = _price_items(db, payload.items)
    address = None if payload.pickup else _address_snapshot(db, actor.id, payload.address_id)
    fee = compute_delivery_fee(row, pickup=payload.pickup, distance_km=payload.distance_km)
    return CheckoutQuote(
        items=priced,
        subtotal_cents=sum(item.line_total_cents for item in priced),
        delivery_fee_cents=fee,
        address=address,
    )


# --- API pública ---


def preview_order(db: Session, actor: Actor, payload: schemas.CheckoutIn) -> schemas.CheckoutPreviewOut:
    quote = quote_order(db, actor, payload)
    return schemas.CheckoutPreviewOut(
        subtotal_cents=quote.subtotal_cents,
        delivery_fee_cents=quote.delivery_fee_cents,
        total_cents=quote.total_cents,
    )


def place_order(
    db: Session,
    actor: Actor,
    payload: schemas.CheckoutIn,
    notifier: Notifier,
) -> models.Order:
    quote = quote_order(db, actor, payload)
    order = models.Order(
        id=_gen_id(),
        customer_id=actor.id,
        status=models.OrderStatus.received.value,
        payment_method=models.PaymentMethod(payload.payment_method),
        subtotal_cents=quote.subtotal_cents,
        delivery_fee_cents=quote.delivery_fee_cents,
        total_cents=quote.total_cents,
        pickup=payload.pickup,
        address=json.dumps(quote.address if quote.address is not None else {"pickup": True}, ensure_ascii=False),
        observations=(payload.observations or "").strip() or None,
    )
    for position, item in enumerate(quote.items):
        order.items.append(
            models.OrderItem(
                id=_gen_id(),
                product_id=item.product.id,
                product_name=item.product.name,
                position=position,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                extras=json.dumps(item.extras, ensure_ascii=False) if item.extras else None,
            )
        )
    db.add(order)
    db.commit()
    db.refresh(order)
    log_event(
        logger,
        "order_created",
        order_id=order.id,
        customer_id=actor.id,
        total_cents=order.total_cents,
        pickup=order.pickup,
    )
    notifier.notify("success", "Pedido realizado", f"Pedido #{order.id[:8]} recebido com sucesso.")
    return order
