from __future__ import annotations

import enum
import json
from dataclasses import dataclass, fields

from storefront.domain.core.enums import UserRole


class Action(enum.Enum):
    browse_catalog = "browse_catalog"
    place_order = "place_order"
    view_own_orders = "view_own_orders"
    view_orders = "view_orders"
    change_order_status = "change_order_status"
    manage_stock = "manage_stock"
    manage_products = "manage_products"
    manage_promotions = "manage_promotions"
    view_reports = "view_reports"
    export_order_report = "export_order_report"
    manage_employees = "manage_employees"
    manage_settings = "manage_settings"


PERMISSION_ALIASES = {
    "manage_stock": "manageStock",
    "view_reports": "viewReports",
    "change_order_status": "changeOrderStatus",
    "export_order_report_pdf": "exportOrderReportPDF",
    "promotion_products": "promotionProducts",
}


@dataclass(frozen=True, slots=True)
class EmployeePermissions:
    manage_stock: bool = False
    view_reports: bool = False
    change_order_status: bool = False
    export_order_report_pdf: bool = False
    promotion_products: bool = False

    @classmethod
    def from_mapping(cls, data: dict | None) -> EmployeePermissions:
        if not data:
            return cls()
        values: dict[str, bool] = {}
        for field in fields(cls):
            alias = PERMISSION_ALIASES[field.name]
            raw = data.get(alias, data.get(field.name, False))
            values[field.name] = bool(raw)
        return cls(**values)

    def to_mapping(self) -> dict[str, bool]:
        return {PERMISSION_ALIASES[field.name]: getattr(self, field.name) for field in fields(self)}


def load_permissions(raw: str | None) -> EmployeePermissions:
    if not raw:
        return EmployeePermissions()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return EmployeePermissions()
    if not isinstance(data, dict):
        return EmployeePermissions()
    return EmployeePermissions.from_mapping(data)


def dump_permissions(permissions: EmployeePermissions) -> str:
    return json.dumps(permissions.to_mapping())


_EMPLOYEE_FLAG_ACTIONS: dict[str, frozenset[Action]] = {
    "change_order_status": frozenset({Action.view_orders, Action.change_order_status}),
    "manage_stock": frozenset({Action.manage_stock}),
    "view_reports": frozenset({Action.view_reports}),
    "export_order_report_pdf": frozenset({Action.export_order_report}),
    "promotion_products": frozenset({Action.manage_promotions}),
}


def _coerce_role(role: UserRole | str) -> UserRole | None:
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(str(role).strip().lower())
    except ValueError:
        return None


def allowed_actions(role: UserRole | str, permissions: EmployeePermissions | None = None) -> frozenset[Action]:
    resolved = _coerce_role(role)
    if resolved is None:
        return frozenset({Action.browse_catalog})
    if resolved == UserRole.admin:
        return frozenset(Action)
    if resolved == UserRole.motoboy:
        return frozenset({Action.browse_catalog, Action.view_orders, Action.change_order_status})
    if resolved == UserRole.customer:
        return frozenset({Action.browse_catalog, Action.place_order, Action.view_own_orders})

    granted: set[Action] = {Action.browse_catalog}
    flags = permissions or EmployeePermissions()
    for flag, actions in _EMPLOYEE_FLAG_ACTIONS.items():
        if getattr(flags, flag):
            granted.update(actions)
    return frozenset(granted)


@dataclass(frozen=True, slots=True)
class MenuItem:
    name: str
    path: str
    action: Action


ADMIN_MENU = [
    MenuItem("Dashboard", "/admin", Action.view_reports),
    MenuItem("Produtos", "/admin/produtos", Action.manage_products),
    MenuItem("Funcionários", "/admin/funcionarios", Action.manage_employees),
    MenuItem("Relatórios", "/admin/relatorios", Action.view_reports),
    MenuItem("Pedidos", "/admin/pedidos", Action.view_orders),
    MenuItem("Configurações", "/admin/configuracoes", Action.manage_settings),
]
EMPLOYEE_MENU = [
    MenuItem("Pedidos", "/employee", Action.change_order_status),
    MenuItem("Promoções", "/employee/promocoes", Action.manage_promotions),
    MenuItem("Estoque", "/employee/estoque", Action.manage_stock),
    MenuItem("Relatórios", "/employee/relatorios", Action.view_reports),
    MenuItem("Exportações", "/employee/exportacoes", Action.export_order_report),
]
MOTOBOY_MENU = [
    MenuItem("Entregas", "/motoboy", Action.change_order_status),
]
CUSTOMER_MENU = [
    MenuItem("Cardápio", "/cardapio", Action.browse_catalog),
    MenuItem("Carrinho", "/carrinho", Action.place_order),
    MenuItem("Meus pedidos", "/pedidos", Action.view_own_orders),
]

_MENUS = {
    UserRole.admin: ADMIN_MENU,
    UserRole.employee: EMPLOYEE_MENU,
    UserRole.motoboy: MOTOBOY_MENU,
    UserRole.customer: CUSTOMER_MENU,
}


def menu_for(role: UserRole | str, permissions: EmployeePermissions | None = None) -> list[MenuItem]:
    resolved = _coerce_role(role)
    if resolved is None:
        return []
    granted = allowed_actions(resolved, permissions)
    return [item for item in _MENUS[resolved] if item.action in granted]
