import pytest

from storefront.domain.access.capabilities import Action, EmployeePermissions, allowed_actions
from storefront.domain.core.enums import UserRole
from storefront.domain.order.status_policy import (
    PolicyViolation,
    StatusOption,
    ensure_transition_allowed,
    legal_next_statuses,
    status_options,
    status_text,
)

ALL_ROLES = list(UserRole)


@pytest.mark.parametrize("role", ALL_ROLES)
def test_received_offers_preparing_to_every_role(role):
    assert status_options("received", role) == [StatusOption("preparing", "Em preparação")]


@pytest.mark.parametrize("role", ALL_ROLES)
def test_preparing_offers_forward_then_backward(role):
    assert legal_next_statuses("preparing", role) == ["delivering", "received"]


def test_delivering_for_motoboy_is_completed_only():
    assert status_options("delivering", UserRole.motoboy) == [StatusOption("completed", "Entregue")]


def test_delivering_for_employee_has_no_options():
    assert status_options("delivering", UserRole.employee) == []


def test_delivering_for_admin_goes_back_to_preparing():
    assert status_options("delivering", "admin") == [StatusOption("preparing", "Em preparação")]


@pytest.mark.parametrize("role", ALL_ROLES)
def test_completed_is_terminal(role):
    assert status_options("completed", role) == []


@pytest.mark.parametrize("status", ["canceled", "unknown", None, ""])
def test_unknown_or_canceled_status_has_no_options(status):
    assert status_options(status, UserRole.admin) == []


def test_options_are_stable_across_calls():
    first = status_options("preparing", UserRole.employee)
    second = status_options("preparing", UserRole.employee)
    assert first == second


def test_ensure_allows_legal_transition():
    actions = allowed_actions(UserRole.motoboy)
    assert ensure_transition_allowed("delivering", "completed", UserRole.motoboy, actions).value == "completed"


def test_ensure_rejects_target_outside_legal_set():
    actions = allowed_actions(UserRole.employee, EmployeePermissions(change_order_status=True))
    with pytest.raises(PolicyViolation):
        ensure_transition_allowed("delivering", "completed", UserRole.employee, actions)


def test_ensure_rejects_skipping_steps():
    with pytest.raises(PolicyViolation):
        ensure_transition_allowed("received", "completed", UserRole.admin, allowed_actions(UserRole.admin))


def test_ensure_rejects_actor_without_capability():
    with pytest.raises(PolicyViolation):
        ensure_transition_allowed("received", "preparing", UserRole.employee, allowed_actions(UserRole.employee))
    with pytest.raises(PolicyViolation):
        ensure_transition_allowed("received", "preparing", UserRole.customer, {Action.place_order})


def test_ensure_rejects_invalid_target():
    with pytest.raises(PolicyViolation, match="inválido"):
        ensure_transition_allowed("received", "canceled", UserRole.admin, allowed_actions(UserRole.admin))


def test_status_text_covers_canceled():
    assert status_text("canceled") == "Pedido cancelado"
    assert status_text("delivering") == "Saiu para entrega"
