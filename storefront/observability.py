from __future__ import annotations

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("storefront.request")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
logger.setLevel(logging.INFO)
logger.propagate = False


def log_event(target: logging.Logger, event: str, *, level: int = logging.INFO, **fields) -> None:
    """Write one JSON line: ``{"event": ..., **fields}``."""
    payload = {"event": event}
    payload.update(fields)
    target.log(level, json.dumps(payload, ensure_ascii=True, default=str))


def _level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request, tagged with the acting role once auth resolved it."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(json.dumps(self._fields(request, request_id, started, 500), ensure_ascii=True))
            raise

        fields = self._fields(request, request_id, started, response.status_code)
        log_event(logger, fields.pop("event"), level=_level_for_status(response.status_code), **fields)
        response.headers["X-Request-Id"] = request_id
        return response

    @staticmethod
    def _fields(request: Request, request_id: str, started: float, status: int) -> dict:
        return {
            "event": "http_request",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": int((time.perf_counter() - started) * 1000),
            "actor_role": getattr(request.state, "actor_role", None),
            "client_ip": _client_ip(request),
        }
