from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class CartLineModel(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True)

    # wlasciciel: "user" albo "guest" + id usera / id sesji goscia
    owner_kind = Column(String(8), nullable=False)
    owner_key = Column(String(128), nullable=False)

    product_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    # "" zamiast NULL, inaczej unique constraint nie obejmie linii bez rozmiaru/koloru
    size = Column(String(64), nullable=False, default="")
    color = Column(String(64), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    __table_args__ = (
        UniqueConstraint(
            "owner_kind", "owner_key", "product_id", "size", "color",
            name="u_cart_line_key",
        ),
        CheckConstraint("quantity >= 1", name="ck_cart_line_quantity"),
        Index("ix_cart_lines_owner", "owner_kind", "owner_key"),
    )
