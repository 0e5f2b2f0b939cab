from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

PaymentMethodValue = Literal["pix", "dinheiro", "cartao"]
CategoryValue = Literal["lanche", "bebida", "refeicao", "sobremesa", "outro"]
StaffRoleValue = Literal["admin", "employee", "motoboy"]


class NotificationOut(BaseModel):
    kind: Literal["success", "destructive"]
    title: str
    description: str


# Auth


class LoginIn(BaseModel):
    credential_type: Literal["email", "username"]
    credential: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class PasswordChangeIn(BaseModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    name: str
    role: str
    permissions: Dict[str, bool] = {}
    first_login: bool = False
    expires_in_seconds: int


class MeOut(BaseModel):
    id: str
    name: str
    role: str
    permissions: Dict[str, bool] = {}
    actions: List[str] = []


class MenuItemOut(BaseModel):
    name: str
    path: str


# Catalog


class ExtraIn(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    price_cents: int = Field(ge=0)


class ExtraOut(BaseModel):
    id: str
    name: str
    price_cents: int


class ProductOut(BaseModel):
    id: str
    name: str
    description: str = ""
    price_cents: int
    promotion_price_cents: Optional[int] = None
    effective_price_cents: int
    image_url: str = ""
    category: CategoryValue
    is_out_of_stock: bool
    extras: List[ExtraOut] = []


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    price_cents: int = Field(ge=0)
    image_url: str = ""
    category: CategoryValue = "outro"
    is_out_of_stock: bool = False
    extras: List[ExtraIn] = []


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price_cents: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    category: Optional[CategoryValue] = None
    is_out_of_stock: Optional[bool] = None
    extras: Optional[List[ExtraIn]] = None


class ProductStockUpdate(BaseModel):
    is_out_of_stock: bool


class ProductPromotionUpdate(BaseModel):
    promotion_price_cents: Optional[int] = Field(default=None, ge=0)


class ProductCheckIn(BaseModel):
    product_ids: List[str] = Field(min_length=1)


class ProductCheckOut(BaseModel):
    missing: List[str] = []
    out_of_stock: List[str] = []


# Customers


class AddressIn(BaseModel):
    label: Optional[str] = None
    street: str = Field(min_length=1)
    number: str = Field(min_length=1)
    neighborhood: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(default="", max_length=2)
    zip_code: str = Field(min_length=8, max_length=9)
    complement: Optional[str] = None


class AddressOut(BaseModel):
    id: str
    label: Optional[str] = None
    street: str
    number: str
    neighborhood: str
    city: str
    state: str
    zip_code: str
    complement: Optional[str] = None
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


# Checkout


class CheckoutItemIn(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    extra_ids: List[str] = []


class CheckoutIn(BaseModel):
    items: List[CheckoutItemIn]
    pickup: bool = False
    address_id: Optional[str] = None
    distance_km: Optional[float] = Field(default=None, ge=0)
    payment_method: PaymentMethodValue = "pix"
    observations: Optional[str] = Field(default=None, max_length=1000)


class CheckoutPreviewOut(BaseModel):
    subtotal_cents: int
    delivery_fee_cents: int
    total_cents: int


class CheckoutOut(BaseModel):
    order_id: str
    status: str
    subtotal_cents: int
    delivery_fee_cents: int
    total_cents: int
    notifications: List[NotificationOut] = []


# Orders


class OrderItemOut(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price_cents: int
    extras: List[ExtraOut] = []
    line_total_cents: int


class OrderOut(BaseModel):
    id: str
    customer_id: str
    customer_name: Optional[str] = None
    status: str
    status_text: str
    payment_method: PaymentMethodValue
    payment_method_label: str
    subtotal_cents: int
    delivery_fee_cents: int
    total_cents: int
    pickup: bool
    address: dict
    observations: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = []


class OrderListItem(BaseModel):
    id: str
    customer_name: Optional[str] = None
    status: str
    status_text: str
    payment_method: PaymentMethodValue
    pickup: bool
    total_cents: int
    created_at: datetime


class StatusOptionOut(BaseModel):
    value: str
    label: str


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., description="Novo status do pedido")


class OrderStatusUpdateOut(BaseModel):
    ok: bool
    order_id: str
    status: str
    status_text: str
    notifications: List[NotificationOut] = []


# Employees


class EmployeePermissionsIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    manage_stock: bool = Field(default=False, alias="manageStock")
    view_reports: bool = Field(default=False, alias="viewReports")
    change_order_status: bool = Field(default=False, alias="changeOrderStatus")
    export_order_report_pdf: bool = Field(default=False, alias="exportOrderReportPDF")
    promotion_products: bool = Field(default=False, alias="promotionProducts")


class EmployeeCreate(BaseModel):
    name: str = Field(min_length=1)
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6, max_length=128)
    role: StaffRoleValue = "employee"
    registration_number: Optional[str] = None
    cpf: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    pix_key: Optional[str] = None
    permissions: EmployeePermissionsIn = EmployeePermissionsIn()


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    username: Optional[str] = Field(default=None, min_length=3, max_length=64)
    password: Optional[str] = Field(default=None, min_length=6, max_length=128)
    role: Optional[StaffRoleValue] = None
    cpf: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    pix_key: Optional[str] = None
    permissions: Optional[EmployeePermissionsIn] = None


class EmployeeOut(BaseModel):
    id: str
    name: str
    username: str
    role: StaffRoleValue
    registration_number: str
    cpf: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    pix_key: Optional[str] = None
    permissions: Dict[str, bool]
    first_login: bool


# Settings


class DeliveryTierIn(BaseModel):
    id: Optional[str] = None
    min_distance: float = Field(ge=0)
    max_distance: float = Field(ge=0)
    fee_cents: int = Field(ge=0)


class DeliveryTierOut(BaseModel):
    id: str
    min_distance: float
    max_distance: float
    fee_cents: int


class WorkingHoursDay(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_open: bool = False


class WorkingHoursDayOut(WorkingHoursDay):
    id: str


class StoreAddress(BaseModel):
    street: str = ""
    number: str = ""
    city: str = ""
    zip: str = ""


class StoreSettingsOut(BaseModel):
    store_name: str
    store_phone: str
    pix_key: str
    whatsapp_link: str
    shipping_fee_cents: int
    free_shipping_radius_km: float
    store_address: StoreAddress
    working_hours: List[WorkingHoursDayOut]
    delivery_tiers: List[DeliveryTierOut]


class StoreSettingsUpdate(BaseModel):
    store_name: Optional[str] = None
    store_phone: Optional[str] = None
    pix_key: Optional[str] = None
    whatsapp_link: Optional[str] = None
    shipping_fee_cents: Optional[int] = Field(default=None, ge=0)
    free_shipping_radius_km: Optional[float] = Field(default=None, ge=0)
    store_address: Optional[StoreAddress] = None


class StorePublicOut(BaseModel):
    store_name: str
    store_phone: str
    whatsapp_link: str
    pix_key: str
    store_address: StoreAddress
    working_hours: List[WorkingHoursDayOut]
    is_open: bool
    shipping_fee_cents: int
    free_shipping_radius_km: float
    delivery_tiers: List[DeliveryTierOut]


class DeliveryTiersOut(BaseModel):
    delivery_tiers: List[DeliveryTierOut]
    notifications: List[NotificationOut] = []


class WorkingHoursOut(BaseModel):
    working_hours: List[WorkingHoursDayOut]
    notifications: List[NotificationOut] = []


# Reports


class DashboardOut(BaseModel):
    daily_revenue_cents: int
    total_orders: int
    canceled_orders: int
    payment_methods: Dict[str, int]


class SalesReportProductOut(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    revenue_cents: int


class SalesReportOut(BaseModel):
    period_start: date
    period_end: date
    card_sales_cents: int
    pix_sales_cents: int
    cash_sales_cents: int
    products_sold: List[SalesReportProductOut]
    total_revenue_cents: int
