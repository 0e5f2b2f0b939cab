from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_STORE_TIMEZONE = "America/Sao_Paulo"
DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "18:00"
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

# 0 = Sunday, like the storefront calendar
DAY_NAMES = [
    "Domingo",
    "Segunda-feira",
    "Terça-feira",
    "Quarta-feira",
    "Quinta-feira",
    "Sexta-feira",
    "Sábado",
]


def _default_day(day: int) -> dict:
    return {
        "id": f"day-{day}",
        "day_of_week": day,
        "open_time": DEFAULT_OPEN_TIME,
        "close_time": DEFAULT_CLOSE_TIME,
        "is_open": day != 0,
    }


def default_working_hours() -> list[dict]:
    return [_default_day(day) for day in range(7)]


def normalize_working_hours(items: Iterable[dict]) -> list[dict]:
    normalized: dict[int, dict] = {}
    for item in items:
        day_raw = item.get("day_of_week")
        if day_raw is None:
            raise ValueError("Dia da semana ausente")
        day = int(day_raw)
        if day < 0 or day > 6:
            raise ValueError("Dia da semana inválido")

        is_open = bool(item.get("is_open", False))
        open_time = _normalize_time(item.get("open_time"))
        close_time = _normalize_time(item.get("close_time"))

        if is_open:
            if open_time is None or close_time is None:
                raise ValueError(f"O horário para {DAY_NAMES[day]} deve estar no formato HH:MM.")
            if _time_to_minutes(close_time) <= _time_to_minutes(open_time):
                raise ValueError(
                    f"Para {DAY_NAMES[day]}, o horário de fechamento deve ser posterior ao de abertura."
                )

        normalized[day] = {
            "id": f"day-{day}",
            "day_of_week": day,
            "open_time": open_time or DEFAULT_OPEN_TIME,
            "close_time": close_time or DEFAULT_CLOSE_TIME,
            "is_open": is_open,
        }

    for day in range(7):
        normalized.setdefault(day, _default_day(day))
    return [normalized[key] for key in sorted(normalized.keys())]


def load_working_hours(raw: str | None) -> list[dict]:
    if not raw:
        return default_working_hours()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return default_working_hours()
    if not isinstance(data, list):
        return default_working_hours()
    try:
        return normalize_working_hours(data)
    except (TypeError, ValueError):
        return default_working_hours()


def dump_working_hours(values: Iterable[dict]) -> str:
    return json.dumps(normalize_working_hours(values), ensure_ascii=False)


def tzinfo_for_store(tz_name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name or DEFAULT_STORE_TIMEZONE)
    except ZoneInfoNotFoundError:
        return ZoneInfo(DEFAULT_STORE_TIMEZONE)


def is_open_at(working_hours: list[dict] | None, moment: datetime) -> bool:
    if not working_hours:
        return True
    # datetime.weekday() is Monday=0; the store calendar starts on Sunday
    day = (moment.weekday() + 1) % 7
    today = next((item for item in working_hours if item.get("day_of_week") == day), None)
    if not today or not today.get("is_open"):
        return False
    open_minutes = _time_to_minutes(today.get("open_time"))
    close_minutes = _time_to_minutes(today.get("close_time"))
    now_minutes = moment.hour * 60 + moment.minute
    return open_minutes <= now_minutes < close_minutes


def is_store_open(working_hours: list[dict] | None, tz_name: str | None, now: datetime | None = None) -> bool:
    tz = tzinfo_for_store(tz_name)
    moment = now.astimezone(tz) if now is not None else datetime.now(tz)
    return is_open_at(working_hours, moment)


def _normalize_time(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    if not cleaned or not TIME_PATTERN.match(cleaned):
        return None
    hour, minute = cleaned.split(":")
    return f"{int(hour):02d}:{int(minute):02d}"


def _time_to_minutes(value: str | None) -> int:
    if not value:
        return 0
    parts = value.split(":")
    if len(parts) != 2:
        return 0
    return int(parts[0]) * 60 + int(parts[1])
