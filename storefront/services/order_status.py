from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront import models
from storefront.auth.dependencies import Actor
from storefront.domain.order.status_policy import OPTION_LABELS, PolicyViolation, ensure_transition_allowed
from storefront.notifications import Notifier
from storefront.observability import log_event

logger = logging.getLogger(__name__)


def apply_status_transition(
    db: Session,
    *,
    order_id: str,
    target_status: str,
    actor: Actor,
    notifier: Notifier,
) -> models.Order:
    """Move an order to ``target_status``. Sends exactly one notification per call."""
    order = db.get(models.Order, order_id)
    if not order:
        notifier.notify("destructive", "Erro", "Pedido não encontrado.")
        raise HTTPException(404, "Pedido não encontrado")

    previous = order.status
    try:
        target = ensure_transition_allowed(previous, target_status, actor.role, actor.actions)
    except PolicyViolation as exc:
        log_event(
            logger,
            "order_status_rejected",
            level=logging.WARNING,
            order_id=order.id,
            from_status=previous,
            to_status=target_status,
            actor_role=actor.role.value,
        )
        notifier.notify("destructive", "Erro", str(exc))
        raise HTTPException(403, str(exc)) from exc

    order.status = target.value
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("order status update failed order_id=%s", order.id)
        notifier.notify("destructive", "Erro", "Não foi possível atualizar o status do pedido.")
        raise HTTPException(500, "Não foi possível atualizar o status do pedido") from exc

    db.refresh(order)
    log_event(
        logger,
        "order_status_changed",
        order_id=order.id,
        from_status=previous,
        to_status=order.status,
        actor_id=actor.id,
        actor_role=actor.role.value,
    )
    notifier.notify(
        "success",
        "Status atualizado",
        f'Pedido #{order.id[:8]} atualizado para "{OPTION_LABELS[target]}".',
    )
    return order
