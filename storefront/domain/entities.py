# storefront/domain/entities.py
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CatalogProduct:
    """Aktualne dane produktu z katalogu (zmienne - uzywane przez koszyk)."""

    id: int
    name: str
    price: Decimal
    image_url: str | None = None
    sku: str | None = None
    stock: int | None = None

    @classmethod
    def from_payload(cls, data: dict) -> "CatalogProduct":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            price=Decimal(str(data["price"])),
            image_url=data.get("image_url"),
            sku=data.get("sku"),
            stock=data.get("stock"),
        )


@dataclass(frozen=True)
class OrderLineSnapshot:
    """Kopia linii koszyka w momencie zakupu (niezmienna)."""

    product_id: int
    product_name: str
    product_image_url: str | None
    unit_price: Decimal
    quantity: int
    size: str | None
    color: str | None
    sku: str | None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PaymentResult:
    succeeded: bool
    payment_method: str = "card"
    payment_intent_id: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class PricingConfig:
    free_shipping_threshold: Decimal
    flat_shipping_fee: Decimal
    tax_rate: Decimal


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping_fee: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
