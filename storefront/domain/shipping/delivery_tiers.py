"""Distance-based delivery fee tiers.

A tier covers ``[min_distance, max_distance)`` kilometres and charges a flat
fee. A collection of tiers is saved only when, sorted by ``min_distance``
(ties broken by ``max_distance``), it starts at 0 km and each tier begins
exactly where the previous one ends.
"""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, Sequence

from storefront.notifications import Notifier
from storefront.observability import log_event

logger = logging.getLogger(__name__)

MAX_DELIVERY_TIERS = 20
DEFAULT_TIER_MAX_KM = 3.0


@dataclass(frozen=True, slots=True)
class DeliveryTier:
    id: str
    min_distance: float
    max_distance: float
    fee_cents: int


@dataclass(frozen=True, slots=True)
class TierViolation:
    code: str
    title: str
    description: str


EMPTY_TIERS = TierViolation(
    code="empty",
    title="Faixas inválidas",
    description="Cadastre ao menos uma faixa de entrega.",
)
FIRST_TIER_NOT_AT_ZERO = TierViolation(
    code="first_not_zero",
    title="Faixa inválida",
    description="A primeira faixa deve começar em 0 km.",
)
TIERS_NOT_CONTIGUOUS = TierViolation(
    code="not_contiguous",
    title="Faixas inválidas",
    description="As faixas de entrega devem ser contínuas, sem sobreposições ou lacunas.",
)
MIN_NOT_BELOW_MAX = TierViolation(
    code="min_not_below_max",
    title="Faixa inválida",
    description="A distância mínima deve ser menor que a distância máxima em cada faixa.",
)


def sort_delivery_tiers(tiers: Iterable[DeliveryTier]) -> list[DeliveryTier]:
    return sorted(tiers, key=lambda tier: (tier.min_distance, tier.max_distance))


def first_tier_violation(tiers: Sequence[DeliveryTier]) -> TierViolation | None:
    """Return the first broken rule, checked in a fixed order, or None."""
    if not tiers:
        return EMPTY_TIERS
    ordered = sort_delivery_tiers(tiers)
    if ordered[0].min_distance != 0:
        return FIRST_TIER_NOT_AT_ZERO
    for current, following in zip(ordered, ordered[1:]):
        if current.max_distance != following.min_distance:
            return TIERS_NOT_CONTIGUOUS
    for tier in ordered:
        if tier.min_distance >= tier.max_distance:
            return MIN_NOT_BELOW_MAX
    return None


def validate_delivery_tiers(tiers: Sequence[DeliveryTier], notifier: Notifier) -> bool:
    violation = first_tier_violation(tiers)
    if violation is None:
        return True
    log_event(
        logger,
        "delivery_tiers_rejected",
        level=logging.WARNING,
        reason=violation.code,
        tiers=len(tiers),
    )
    notifier.notify("destructive", violation.title, violation.description)
    return False


def fee_for_distance(tiers: Sequence[DeliveryTier], km: float) -> int | None:
    ordered = sort_delivery_tiers(tiers)
    if not ordered or km < 0:
        return None
    for tier in ordered:
        if tier.min_distance <= km < tier.max_distance:
            return tier.fee_cents
    last = ordered[-1]
    if km == last.max_distance:
        return last.fee_cents
    return None


def default_delivery_tiers(base_fee_cents: int = 500) -> list[DeliveryTier]:
    return [DeliveryTier(id="tier-1", min_distance=0.0, max_distance=DEFAULT_TIER_MAX_KM, fee_cents=base_fee_cents)]


def normalize_delivery_tiers(items: Iterable[dict]) -> list[DeliveryTier]:
    tiers: list[DeliveryTier] = []
    seen_ids: set[str] = set()
    for idx, item in enumerate(items, start=1):
        try:
            min_distance = float(item["min_distance"])
            max_distance = float(item["max_distance"])
            fee_cents = int(item["fee_cents"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Faixa {idx} incompleta") from exc
        if min_distance < 0 or max_distance < 0:
            raise ValueError(f"Distancia invalida na faixa {idx}")
        if fee_cents < 0:
            raise ValueError(f"Valor invalido na faixa {idx}")
        tier_id = str(item.get("id") or "").strip() or f"tier-{uuid.uuid4().hex[:8]}"
        if tier_id in seen_ids:
            raise ValueError(f"Identificador repetido na faixa {idx}")
        seen_ids.add(tier_id)
        tiers.append(
            DeliveryTier(id=tier_id, min_distance=min_distance, max_distance=max_distance, fee_cents=fee_cents)
        )
    if len(tiers) > MAX_DELIVERY_TIERS:
        raise ValueError(f"Maximo de {MAX_DELIVERY_TIERS} faixas de distancia")
    return tiers


def tier_to_dict(tier: DeliveryTier) -> dict:
    return {
        "id": tier.id,
        "min_distance": tier.min_distance,
        "max_distance": tier.max_distance,
        "fee_cents": tier.fee_cents,
    }


def load_delivery_tiers(raw: str | None, base_fee_cents: int = 500) -> list[DeliveryTier]:
    if not raw:
        return default_delivery_tiers(base_fee_cents)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return default_delivery_tiers(base_fee_cents)
    if not isinstance(data, list) or not data:
        return default_delivery_tiers(base_fee_cents)
    try:
        return sort_delivery_tiers(normalize_delivery_tiers(data))
    except ValueError:
        return default_delivery_tiers(base_fee_cents)


def dump_delivery_tiers(tiers: Iterable[DeliveryTier]) -> str:
    return json.dumps([tier_to_dict(tier) for tier in sort_delivery_tiers(tiers)], ensure_ascii=False)
