from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db import Base

STORE_SETTINGS_ID = "1"


class StoreSettings(Base):
    __tablename__ = "store_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=STORE_SETTINGS_ID)
    store_name: Mapped[str] = mapped_column(String, default="", nullable=False)
    store_phone: Mapped[str] = mapped_column(String, default="", nullable=False)
    pix_key: Mapped[str] = mapped_column(Text, default="", nullable=False)
    whatsapp_link: Mapped[str] = mapped_column(Text, default="", nullable=False)
    shipping_fee_cents: Mapped[int] = mapped_column(Integer, default=500, nullable=False)
    free_shipping_radius_km: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    store_address: Mapped[str | None] = mapped_column(Text)
    working_hours: Mapped[str | None] = mapped_column(Text)
    delivery_tiers: Mapped[str | None] = mapped_column(Text)
