from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront import models, schemas
from storefront.auth.dependencies import Actor, require_action
from storefront.db import get_db, settings
from storefront.domain.access.capabilities import Action
from storefront.domain.config.working_hours import is_store_open
from storefront.domain.shipping.delivery_tiers import DeliveryTier, tier_to_dict
from storefront.notifications import RequestNotifier, get_notifier, with_notifications
from storefront.services.store_settings import (
    get_store_settings_or_503,
    hours_for,
    load_store_address,
    replace_delivery_tiers,
    replace_working_hours,
    tiers_for,
    update_store_info,
)

router = APIRouter(prefix="/admin/settings", tags=["admin-settings"])
public_router = APIRouter(tags=["store"])


def _tiers_out(tiers: list[DeliveryTier]) -> list[schemas.DeliveryTierOut]:
    return [schemas.DeliveryTierOut(**tier_to_dict(tier)) for tier in tiers]


def _settings_out(row: models.StoreSettings) -> schemas.StoreSettingsOut:
    return schemas.StoreSettingsOut(
        store_name=row.store_name,
        store_phone=row.store_phone,
        pix_key=row.pix_key,
        whatsapp_link=row.whatsapp_link,
        shipping_fee_cents=row.shipping_fee_cents,
        free_shipping_radius_km=row.free_shipping_radius_km,
        store_address=schemas.StoreAddress(**load_store_address(row.store_address)),
        working_hours=[schemas.WorkingHoursDayOut(**day) for day in hours_for(row)],
        delivery_tiers=_tiers_out(tiers_for(row)),
    )


@public_router.get("/store", response_model=schemas.StorePublicOut)
def get_store(db: Session = Depends(get_db)):
    row = get_store_settings_or_503(db)
    hours = hours_for(row)
    return schemas.StorePublicOut(
        store_name=row.store_name,
        store_phone=row.store_phone,
        whatsapp_link=row.whatsapp_link,
        pix_key=row.pix_key,
        store_address=schemas.StoreAddress(**load_store_address(row.store_address)),
        working_hours=[schemas.WorkingHoursDayOut(**day) for day in hours],
        is_open=is_store_open(hours, settings.store_timezone),
        shipping_fee_cents=row.shipping_fee_cents,
        free_shipping_radius_km=row.free_shipping_radius_km,
        delivery_tiers=_tiers_out(tiers_for(row)),
    )


@router.get("", response_model=schemas.StoreSettingsOut)
def get_settings(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_settings)),
):
    return _settings_out(get_store_settings_or_503(db))


@router.patch("", response_model=schemas.StoreSettingsOut)
def patch_settings(
    payload: schemas.StoreSettingsUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_settings)),
):
    row = get_store_settings_or_503(db)
    return _settings_out(update_store_info(db, row, payload))


@router.put("/delivery-tiers", response_model=schemas.DeliveryTiersOut)
def put_delivery_tiers(
    payload: list[schemas.DeliveryTierIn],
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_settings)),
    notifier: RequestNotifier = Depends(get_notifier),
):
    row = get_store_settings_or_503(db)
    try:
        tiers = replace_delivery_tiers(db, row, [item.model_dump() for item in payload], notifier)
    except HTTPException as exc:
        raise with_notifications(exc, notifier) from exc
    return schemas.DeliveryTiersOut(delivery_tiers=_tiers_out(tiers), notifications=notifier.dump())


@router.put("/working-hours", response_model=schemas.WorkingHoursOut)
def put_working_hours(
    payload: list[schemas.WorkingHoursDay],
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.manage_settings)),
    notifier: RequestNotifier = Depends(get_notifier),
):
    row = get_store_settings_or_503(db)
    try:
        hours = replace_working_hours(db, row, [item.model_dump() for item in payload], notifier)
    except HTTPException as exc:
        raise with_notifications(exc, notifier) from exc
    return schemas.WorkingHoursOut(
        working_hours=[schemas.WorkingHoursDayOut(**day) for day in hours],
        notifications=notifier.dump(),
    )
