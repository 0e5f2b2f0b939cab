"""
Serviço de relatórios: dashboard do dia e vendas por período.
Pedidos cancelados não contam receita.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from storefront import models, schemas
from storefront.db import settings
from storefront.domain.catalog.extras import load_extras
from storefront.domain.config.working_hours import tzinfo_for_store

CANCELED = models.OrderStatus.canceled.value


def _day_bounds_utc(start: date, end: date) -> tuple[datetime, datetime]:
    tz = tzinfo_for_store(settings.store_timezone)
    range_start = datetime.combine(start, time(0, 0), tzinfo=tz).astimezone(timezone.utc)
    range_end = datetime.combine(end + timedelta(days=1), time(0, 0), tzinfo=tz).astimezone(timezone.utc)
    return range_start, range_end


def store_today() -> date:
    return datetime.now(timezone.utc).astimezone(tzinfo_for_store(settings.store_timezone)).date()


def _item_revenue_cents(item: models.OrderItem) -> int:
    extras_cents = sum(int(extra["price_cents"]) for extra in load_extras(item.extras))
    return (int(item.unit_price_cents) + extras_cents) * int(item.quantity)


def get_dashboard(db: Session) -> schemas.DashboardOut:
    today = store_today()
    range_start, range_end = _day_bounds_utc(today, today)
    in_range = (models.Order.created_at >= range_start, models.Order.created_at < range_end)

    total_orders = db.query(func.count(models.Order.id)).filter(*in_range).scalar() or 0
    canceled_orders = (
        db.query(func.count(models.Order.id)).filter(*in_range, models.Order.status == CANCELED).scalar() or 0
    )
    revenue = (
        db.query(func.coalesce(func.sum(models.Order.total_cents), 0))
        .filter(*in_range, models.Order.status != CANCELED)
        .scalar()
    )
    by_method = (
        db.query(models.Order.payment_method, func.count(models.Order.id))
        .filter(*in_range)
        .group_by(models.Order.payment_method)
        .all()
    )
    payment_methods = {method.value: 0 for method in models.PaymentMethod}
    for method, count in by_method:
        payment_methods[method.value] = int(count)

    return schemas.DashboardOut(
        daily_revenue_cents=int(revenue or 0),
        total_orders=int(total_orders),
        canceled_orders=int(canceled_orders),
        payment_methods=payment_methods,
    )


def get_sales_report(db: Session, start: date, end: date) -> schemas.SalesReportOut:
    if end < start:
        raise HTTPException(400, "A data final deve ser posterior à data inicial")
    range_start, range_end = _day_bounds_utc(start, end)
    orders = (
        db.query(models.Order)
        .options(selectinload(models.Order.items))
        .filter(
            models.Order.created_at >= range_start,
            models.Order.created_at < range_end,
            models.Order.status != CANCELED,
        )
        .all()
    )

    by_method: dict[models.PaymentMethod, int] = defaultdict(int)
    products: dict[str, dict] = {}
    for order in orders:
        by_method[order.payment_method] += int(order.total_cents)
        for item in order.items:
            entry = products.setdefault(
                item.product_id,
                {"product_id": item.product_id, "product_name": item.product_name, "quantity": 0, "revenue_cents": 0},
            )
            entry["quantity"] += int(item.quantity)
            entry["revenue_cents"] += _item_revenue_cents(item)

    products_sold = sorted(products.values(), key=lambda entry: (-entry["quantity"], entry["product_name"]))
    return schemas.SalesReportOut(
        period_start=start,
        period_end=end,
        card_sales_cents=by_method[models.PaymentMethod.cartao],
        pix_sales_cents=by_method[models.PaymentMethod.pix],
        cash_sales_cents=by_method[models.PaymentMethod.dinheiro],
        products_sold=[schemas.SalesReportProductOut(**entry) for entry in products_sold],
        total_revenue_cents=sum(by_method.values()),
    )
