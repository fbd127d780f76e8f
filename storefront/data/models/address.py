from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, text

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ShippingAddressModel(Base):
    __tablename__ = "shipping_addresses"
    __table_args__ = (
        # co najwyzej jeden domyslny adres na usera, pilnowane przez baze
        Index(
            "u_shipping_address_default",
            "user_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default"),
        ),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    address_line1 = Column(String(255), nullable=False)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False, default="United States")
    phone = Column(String(40), nullable=True)

    is_default = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
