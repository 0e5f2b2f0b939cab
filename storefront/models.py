from storefront.domain.core.enums import (
    OrderStatus,
    PaymentMethod,
    ProductCategory,
    UserRole,
)
from storefront.domain.catalog.models import Product
from storefront.domain.config.models import STORE_SETTINGS_ID, StoreSettings
from storefront.domain.customer.models import Customer, CustomerAddress
from storefront.domain.order.models import Order, OrderItem
from storefront.domain.staff.models import Employee

__all__ = [
    "OrderStatus",
    "PaymentMethod",
    "ProductCategory",
    "UserRole",
    "Product",
    "StoreSettings",
    "STORE_SETTINGS_ID",
    "Customer",
    "CustomerAddress",
    "Order",
    "OrderItem",
    "Employee",
]
