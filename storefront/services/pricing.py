# storefront/services/pricing.py
import secrets
import string
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from storefront.domain.entities import OrderLineSnapshot, OrderTotals, PricingConfig
from storefront.utils import settings

CENT = Decimal("0.01")
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def default_pricing() -> PricingConfig:
    return PricingConfig(
        free_shipping_threshold=settings.FREE_SHIPPING_THRESHOLD,
        flat_shipping_fee=settings.FLAT_SHIPPING_FEE,
        tax_rate=settings.TAX_RATE,
    )


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(
    lines: Iterable[OrderLineSnapshot],
    config: PricingConfig,
    discount: Decimal = Decimal("0.00"),
) -> OrderTotals:
    """
    subtotal = suma(cena * ilosc)
    shipping = 0 od progu darmowej dostawy, inaczej stala oplata
    tax      = subtotal * stawka, ROUND_HALF_UP do groszy
    total    = subtotal + shipping + tax - discount
    """
    subtotal = to_cents(sum((line.line_total for line in lines), Decimal("0.00")))
    shipping_fee = Decimal("0.00") if subtotal >= config.free_shipping_threshold else config.flat_shipping_fee
    shipping_fee = to_cents(shipping_fee)
    tax = to_cents(subtotal * config.tax_rate)
    discount = to_cents(discount)

    return OrderTotals(
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        tax=tax,
        discount=discount,
        total=subtotal + shipping_fee + tax - discount,
    )


def generate_order_number(now: float | None = None) -> str:
    """ORD-<unix sekundy>-<6 losowych znakow>, np. ORD-1699999999-ABC123."""
    timestamp = int(now if now is not None else time.time())
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"ORD-{timestamp}-{suffix}"
