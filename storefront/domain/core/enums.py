import enum


class OrderStatus(enum.Enum):
    received = "received"
    preparing = "preparing"
    delivering = "delivering"
    completed = "completed"
    canceled = "canceled"


class PaymentMethod(enum.Enum):
    pix = "pix"
    dinheiro = "dinheiro"
    cartao = "cartao"


class UserRole(enum.Enum):
    admin = "admin"
    employee = "employee"
    motoboy = "motoboy"
    customer = "customer"


class ProductCategory(enum.Enum):
    lanche = "lanche"
    bebida = "bebida"
    refeicao = "refeicao"
    sobremesa = "sobremesa"
    outro = "outro"


STAFF_ROLES = frozenset({UserRole.admin, UserRole.employee, UserRole.motoboy})
