from sqlalchemy import Boolean, DateTime, Enum, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db import Base
from storefront.domain.core.enums import ProductCategory


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    promotion_price_cents: Mapped[int | None] = mapped_column(Integer)
    image_url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    category: Mapped[ProductCategory] = mapped_column(
        Enum(ProductCategory), default=ProductCategory.outro, nullable=False
    )
    is_out_of_stock: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    extras: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
