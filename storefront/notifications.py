from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Literal, Protocol

from fastapi import HTTPException

logger = logging.getLogger(__name__)

NotificationKind = Literal["success", "destructive"]


@dataclass(frozen=True, slots=True)
class Notification:
    kind: NotificationKind
    title: str
    description: str

    def as_dict(self) -> dict:
        return asdict(self)


class Notifier(Protocol):
    def notify(self, kind: NotificationKind, title: str, description: str) -> None: ...


class RequestNotifier:
    """Collects the user-facing notifications raised while serving one request."""

    def __init__(self) -> None:
        self.items: list[Notification] = []

    def notify(self, kind: NotificationKind, title: str, description: str) -> None:
        notification = Notification(kind=kind, title=title, description=description)
        self.items.append(notification)
        if kind == "destructive":
            logger.warning("notification kind=%s title=%s description=%s", kind, title, description)
        else:
            logger.info("notification kind=%s title=%s description=%s", kind, title, description)

    def dump(self) -> list[dict]:
        return [item.as_dict() for item in self.items]

    @property
    def last(self) -> Notification | None:
        return self.items[-1] if self.items else None


# Dependency
def get_notifier() -> RequestNotifier:
    return RequestNotifier()


def with_notifications(exc: HTTPException, notifier: RequestNotifier) -> HTTPException:
    """Re-wrap an HTTP error so the client also receives the notifications sent so far."""
    return HTTPException(
        status_code=exc.status_code,
        detail={"message": exc.detail, "notifications": notifier.dump()},
    )
