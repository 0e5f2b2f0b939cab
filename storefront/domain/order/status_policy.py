"""Order workflow: received -> preparing -> delivering -> completed.

Two backward edges exist: preparing -> received for anyone handling orders,
and delivering -> preparing for admins only. Only motoboys close a delivery.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from storefront.domain.access.capabilities import Action
from storefront.domain.core.enums import OrderStatus, UserRole

WORKFLOW_STATUSES = (
    OrderStatus.received,
    OrderStatus.preparing,
    OrderStatus.delivering,
    OrderStatus.completed,
)

OPTION_LABELS = {
    OrderStatus.received: "Recebido",
    OrderStatus.preparing: "Em preparação",
    OrderStatus.delivering: "Em entrega",
    OrderStatus.completed: "Entregue",
}

STATUS_TEXT = {
    OrderStatus.received: "Pedido recebido",
    OrderStatus.preparing: "Em produção",
    OrderStatus.delivering: "Saiu para entrega",
    OrderStatus.completed: "Pedido finalizado",
    OrderStatus.canceled: "Pedido cancelado",
}


class PolicyViolation(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class StatusOption:
    value: str
    label: str


@dataclass(frozen=True, slots=True)
class _Edge:
    target: OrderStatus
    roles: frozenset[UserRole] | None


# Display order per status: forward edge first, then backward.
_EDGES: dict[OrderStatus, tuple[_Edge, ...]] = {
    OrderStatus.received: (_Edge(OrderStatus.preparing, None),),
    OrderStatus.preparing: (
        _Edge(OrderStatus.delivering, None),
        _Edge(OrderStatus.received, None),
    ),
    OrderStatus.delivering: (
        _Edge(OrderStatus.completed, frozenset({UserRole.motoboy})),
        _Edge(OrderStatus.preparing, frozenset({UserRole.admin})),
    ),
    OrderStatus.completed: (),
}


def _coerce_status(status: OrderStatus | str | None) -> OrderStatus | None:
    if status is None:
        return None
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(str(status).strip().lower())
    except ValueError:
        return None


def _coerce_role(role: UserRole | str | None) -> UserRole | None:
    if role is None:
        return None
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(str(role).strip().lower())
    except ValueError:
        return None


def status_options(status: OrderStatus | str | None, role: UserRole | str | None) -> list[StatusOption]:
    current = _coerce_status(status)
    if current is None:
        return []
    actor_role = _coerce_role(role)
    options: list[StatusOption] = []
    for edge in _EDGES.get(current, ()):
        if edge.roles is not None and actor_role not in edge.roles:
            continue
        options.append(StatusOption(value=edge.target.value, label=OPTION_LABELS[edge.target]))
    return options


def legal_next_statuses(status: OrderStatus | str | None, role: UserRole | str | None) -> list[str]:
    return [option.value for option in status_options(status, role)]


def ensure_transition_allowed(
    current: OrderStatus | str,
    target: OrderStatus | str,
    role: UserRole | str,
    actions: Iterable[Action],
) -> OrderStatus:
    if Action.change_order_status not in set(actions):
        raise PolicyViolation("Você não tem permissão para atualizar o status do pedido.")
    target_status = _coerce_status(target)
    if target_status is None or target_status not in WORKFLOW_STATUSES:
        raise PolicyViolation("Status de pedido inválido.")
    legal = legal_next_statuses(current, role)
    if target_status.value not in legal:
        current_status = _coerce_status(current)
        current_label = current_status.value if current_status else str(current)
        raise PolicyViolation(
            f"Transição de '{current_label}' para '{target_status.value}' não permitida."
        )
    return target_status


def status_text(status: OrderStatus | str | None) -> str:
    resolved = _coerce_status(status)
    if resolved is None:
        return str(status or "")
    return STATUS_TEXT[resolved]
