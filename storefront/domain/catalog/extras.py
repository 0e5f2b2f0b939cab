from __future__ import annotations

import json
import uuid
from typing import Iterable


def normalize_extras(items: Iterable[dict]) -> list[dict]:
    result: list[dict] = []
    seen: set[str] = set()
    for idx, item in enumerate(items, start=1):
        name = str(item.get("name") or "").strip()
        if not name:
            raise ValueError(f"Nome obrigatorio no adicional {idx}")
        try:
            price_cents = int(item.get("price_cents", 0))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Preco invalido no adicional {idx}") from exc
        if price_cents < 0:
            raise ValueError(f"Preco invalido no adicional {idx}")
        extra_id = str(item.get("id") or "").strip() or str(uuid.uuid4())
        if extra_id in seen:
            continue
        seen.add(extra_id)
        result.append({"id": extra_id, "name": name, "price_cents": price_cents})
    return result


def load_extras(raw: str | None) -> list[dict]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return []
    if not isinstance(data, list):
        return []
    try:
        return normalize_extras(item for item in data if isinstance(item, dict))
    except ValueError:
        return []


def dump_extras(items: Iterable[dict]) -> str | None:
    normalized = normalize_extras(items)
    if not normalized:
        return None
    return json.dumps(normalized, ensure_ascii=False)


def effective_price_cents(price_cents: int, promotion_price_cents: int | None) -> int:
    if promotion_price_cents is not None and 0 <= promotion_price_cents < price_cents:
        return promotion_price_cents
    return price_cents
