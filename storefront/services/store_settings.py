"""
Configuração da loja: linha única de settings criada na inicialização da aplicação.
Leituras nunca criam a linha; quem precisa dela recebe StoreSettingsNotInitialized.
"""
from __future__ import annotations

import json
import logging
from typing import Iterable

from fastapi import HTTPException
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.domain.config.working_hours import (
    dump_working_hours,
    load_working_hours,
    normalize_working_hours,
)
from storefront.domain.shipping.delivery_tiers import (
    DeliveryTier,
    default_delivery_tiers,
    dump_delivery_tiers,
    load_delivery_tiers,
    normalize_delivery_tiers,
    sort_delivery_tiers,
    validate_delivery_tiers,
)
from storefront.notifications import Notifier
from storefront.observability import log_event

logger = logging.getLogger(__name__)

DEFAULT_STORE_NAME = "Minha Loja"
DEFAULT_SHIPPING_FEE_CENTS = 500
STORE_ADDRESS_KEYS = ("street", "number", "city", "zip")


class StoreSettingsNotInitialized(ValueError):
    pass


def initialize_store_settings(db: Session) -> models.StoreSettings:
    existing = db.get(models.StoreSettings, models.STORE_SETTINGS_ID)
    if existing:
        log_event(logger, "store_settings_loaded", settings_id=existing.id)
        return existing
    row = models.StoreSettings(
        id=models.STORE_SETTINGS_ID,
        store_name=DEFAULT_STORE_NAME,
        store_phone="",
        pix_key="",
        whatsapp_link="",
        shipping_fee_cents=DEFAULT_SHIPPING_FEE_CENTS,
        free_shipping_radius_km=0.0,
        store_address=dump_store_address({}),
        working_hours=dump_working_hours([]),
        delivery_tiers=dump_delivery_tiers(default_delivery_tiers(DEFAULT_SHIPPING_FEE_CENTS)),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    log_event(logger, "store_settings_created", settings_id=row.id)
    return row


def load_store_settings(db: Session) -> models.StoreSettings:
    row = db.get(models.StoreSettings, models.STORE_SETTINGS_ID)
    if row is None:
        raise StoreSettingsNotInitialized("Configurações da loja não inicializadas")
    return row


def get_store_settings_or_503(db: Session) -> models.StoreSettings:
    try:
        return load_store_settings(db)
    except StoreSettingsNotInitialized as exc:
        raise HTTPException(503, str(exc)) from exc


def load_store_address(raw: str | None) -> dict:
    if not raw:
        return {key: "" for key in STORE_ADDRESS_KEYS}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return {key: str(data.get(key) or "").strip() for key in STORE_ADDRESS_KEYS}


def dump_store_address(value: dict) -> str:
    return json.dumps({key: str(value.get(key) or "").strip() for key in STORE_ADDRESS_KEYS}, ensure_ascii=False)


def tiers_for(row: models.StoreSettings) -> list[DeliveryTier]:
    return load_delivery_tiers(row.delivery_tiers, row.shipping_fee_cents)


def hours_for(row: models.StoreSettings) -> list[dict]:
    return load_working_hours(row.working_hours)


def update_store_info(
    db: Session,
    row: models.StoreSettings,
    payload: schemas.StoreSettingsUpdate,
) -> models.StoreSettings:
    data = payload.model_dump(exclude_unset=True)
    for field in ("store_name", "store_phone", "pix_key", "whatsapp_link"):
        if field in data and data[field] is not None:
            setattr(row, field, data[field].strip())
    if data.get("shipping_fee_cents") is not None:
        row.shipping_fee_cents = int(data["shipping_fee_cents"])
    if data.get("free_shipping_radius_km") is not None:
        row.free_shipping_radius_km = float(data["free_shipping_radius_km"])
    if data.get("store_address") is not None:
        row.store_address = dump_store_address(data["store_address"])
    db.commit()
    db.refresh(row)
    log_event(logger, "store_settings_updated", fields=sorted(data.keys()))
    return row


def replace_delivery_tiers(
    db: Session,
    row: models.StoreSettings,
    items: Iterable[dict],
    notifier: Notifier,
) -> list[DeliveryTier]:
    """Validate and persist a whole tier collection. Nothing is saved on failure."""
    try:
        tiers = normalize_delivery_tiers(items)
    except ValueError as exc:
        notifier.notify("destructive", "Faixa inválida", str(exc))
        raise HTTPException(400, str(exc)) from exc
    if not validate_delivery_tiers(tiers, notifier):
        raise HTTPException(400, "Faixas de entrega inválidas")
    ordered = sort_delivery_tiers(tiers)
    row.delivery_tiers = dump_delivery_tiers(ordered)
    db.commit()
    log_event(logger, "delivery_tiers_saved", tiers=len(ordered))
    notifier.notify("success", "Faixas salvas", "As faixas de entrega foram atualizadas.")
    return ordered


def replace_working_hours(
    db: Session,
    row: models.StoreSettings,
    items: Iterable[dict],
    notifier: Notifier,
) -> list[dict]:
    try:
        hours = normalize_working_hours(items)
    except ValueError as exc:
        notifier.notify("destructive", "Horário inválido", str(exc))
        raise HTTPException(400, str(exc)) from exc
    row.working_hours = dump_working_hours(hours)
    db.commit()
    log_event(logger, "working_hours_saved", open_days=sum(1 for day in hours if day["is_open"]))
    notifier.notify("success", "Horários salvos", "Os horários de funcionamento foram atualizados.")
    return hours
