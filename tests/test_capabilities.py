from storefront.domain.access.capabilities import (
    Action,
    EmployeePermissions,
    allowed_actions,
    load_permissions,
    menu_for,
)
from storefront.domain.core.enums import UserRole


def test_admin_gets_every_action():
    assert allowed_actions(UserRole.admin) == frozenset(Action)


def test_customer_actions():
    assert allowed_actions("customer") == {Action.browse_catalog, Action.place_order, Action.view_own_orders}


def test_motoboy_can_change_status_without_flags():
    assert Action.change_order_status in allowed_actions(UserRole.motoboy)
    assert Action.manage_stock not in allowed_actions(UserRole.motoboy)


def test_employee_without_flags_only_browses():
    assert allowed_actions(UserRole.employee, EmployeePermissions()) == {Action.browse_catalog}


def test_employee_flags_map_to_actions():
    permissions = EmployeePermissions(change_order_status=True, promotion_products=True)
    granted = allowed_actions(UserRole.employee, permissions)
    assert {Action.view_orders, Action.change_order_status, Action.manage_promotions} <= granted
    assert Action.manage_stock not in granted
    assert Action.manage_employees not in granted


def test_unknown_role_only_browses():
    assert allowed_actions("ghost") == {Action.browse_catalog}


def test_permissions_accept_camel_case_json():
    permissions = load_permissions('{"manageStock": true, "viewReports": false}')
    assert permissions.manage_stock is True
    assert permissions.view_reports is False
    assert permissions.to_mapping()["manageStock"] is True


def test_broken_permissions_json_grants_nothing():
    assert load_permissions("{oops") == EmployeePermissions()


def test_employee_menu_follows_flags():
    menu = menu_for(UserRole.employee, EmployeePermissions(manage_stock=True))
    assert [item.path for item in menu] == ["/employee/estoque"]


def test_admin_menu_is_complete():
    assert len(menu_for(UserRole.admin)) == 6


def test_customer_menu():
    assert [item.name for item in menu_for(UserRole.customer)] == ["Cardápio", "Carrinho", "Meus pedidos"]
