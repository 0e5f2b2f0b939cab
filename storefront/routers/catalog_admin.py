import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import Actor, require_action
from storefront.db import get_db
from storefront.domain.access.capabilities import Action
from storefront.domain.catalog.extras import dump_extras
from storefront.observability import log_event
from storefront.routers.catalog import product_out

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/products", tags=["admin-products"])


def _get_product_or_404(db: Session, product_id: str) -> models.Product:
    product = db.get(models.Product, product_id)
    if not product:
        raise HTTPException(404, "Produto não encontrado")
    return product


def _dump_extras_or_400(items: list[schemas.ExtraIn]) -> str | None:
    try:
        return dump_extras(item.model_dump() for item in items)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc


@router.post("", response_model=schemas.ProductOut, status_code=201)
def create_product(
    payload: schemas.ProductCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_products)),
):
    product = models.Product(
        id=str(uuid.uuid4()),
        name=payload.name.strip(),
        description=payload.description.strip(),
        price_cents=payload.price_cents,
        image_url=payload.image_url.strip(),
        category=models.ProductCategory(payload.category),
        is_out_of_stock=payload.is_out_of_stock,
        extras=_dump_extras_or_400(payload.extras),
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    log_event(logger, "product_created", product_id=product.id, actor_id=actor.id)
    return product_out(product)


@router.patch("/{product_id}", response_model=schemas.ProductOut)
def update_product(
    product_id: str,
    payload: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_products)),
):
    product = _get_product_or_404(db, product_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        product.name = data["name"].strip()
    if data.get("description") is not None:
        product.description = data["description"].strip()
    if data.get("price_cents") is not None:
        product.price_cents = data["price_cents"]
        if product.promotion_price_cents is not None and product.promotion_price_cents >= product.price_cents:
            product.promotion_price_cents = None
    if data.get("image_url") is not None:
        product.image_url = data["image_url"].strip()
    if data.get("category") is not None:
        product.category = models.ProductCategory(data["category"])
    if data.get("is_out_of_stock") is not None:
        product.is_out_of_stock = data["is_out_of_stock"]
    if payload.extras is not None:
        product.extras = _dump_extras_or_400(payload.extras)
    db.commit()
    db.refresh(product)
    log_event(logger, "product_updated", product_id=product.id, actor_id=actor.id, fields=sorted(data.keys()))
    return product_out(product)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_products)),
):
    product = _get_product_or_404(db, product_id)
    in_orders = db.query(models.OrderItem.id).filter(models.OrderItem.product_id == product.id).first()
    if in_orders:
        raise HTTPException(409, "Produto possui pedidos; marque como esgotado")
    db.delete(product)
    db.commit()
    log_event(logger, "product_deleted", product_id=product_id, actor_id=actor.id)


@router.patch("/{product_id}/stock", response_model=schemas.ProductOut)
def update_stock(
    product_id: str,
    payload: schemas.ProductStockUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_stock)),
):
    product = _get_product_or_404(db, product_id)
    product.is_out_of_stock = payload.is_out_of_stock
    db.commit()
    db.refresh(product)
    log_event(
        logger,
        "product_stock_updated",
        product_id=product.id,
        actor_id=actor.id,
        is_out_of_stock=product.is_out_of_stock,
    )
    return product_out(product)


@router.patch("/{product_id}/promotion", response_model=schemas.ProductOut)
def update_promotion(
    product_id: str,
    payload: schemas.ProductPromotionUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_promotions)),
):
    product = _get_product_or_404(db, product_id)
    promo = payload.promotion_price_cents
    if promo is not None and promo >= product.price_cents:
        raise HTTPException(400, "O preço promocional deve ser menor que o preço normal")
    product.promotion_price_cents = promo
    db.commit()
    db.refresh(product)
    log_event(
        logger,
        "product_promotion_updated",
        product_id=product.id,
        actor_id=actor.id,
        promotion_price_cents=promo,
    )
    return product_out(product)
