# storefront/services/order_service.py
import secrets
from collections import Counter
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.order import OrderLineModel, OrderModel
from storefront.domain.entities import OrderLineSnapshot, PaymentResult, PricingConfig
from storefront.domain.errors import (
    CartChanged,
    CheckoutInProgress,
    EmptyCart,
    OrderNotFound,
    OrderNumberConflict,
    PaymentDeclined,
    ProductUnavailable,
    ValidationFailed,
)
from storefront.domain.order_status import OrderStatus
from storefront.domain.owner import CartOwner, Guest, User, describe
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.pricing import compute_totals, default_pricing, generate_order_number
from storefront.services.product_client import ProductClient
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    """Publiczny widok zamowienia - bez owner_user_id i sesji goscia."""
    return {
        "order_number": order.order_number,
        "email": order.email,
        "status": order.status,
        "subtotal": order.subtotal,
        "shipping_fee": order.shipping_fee,
        "tax": order.tax,
        "discount": order.discount,
        "total": order.total,
        "shipping_address": {
            "first_name": order.shipping_first_name,
            "last_name": order.shipping_last_name,
            "address_line1": order.shipping_address_line1,
            "address_line2": order.shipping_address_line2,
            "city": order.shipping_city,
            "state": order.shipping_state,
            "zip_code": order.shipping_zip_code,
            "country": order.shipping_country,
            "phone": order.shipping_phone,
        },
        "payment_method": order.payment_method,
        "tracking_number": order.tracking_number,
        "shipped_at": order.shipped_at,
        "delivered_at": order.delivered_at,
        "created_at": order.created_at,
        "items": [
            {
                "product_id": line.product_id,
                "product_name": line.product_name,
                "product_image_url": line.product_image_url,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "size": line.size,
                "color": line.color,
                "sku": line.sku,
            }
            for line in order.lines
        ],
    }


class OrderService:
    """
    Serwis odpowiedzialny za skladanie zamowien z koszyka (checkout).
    Separacja od CartService - koszyk czyta aktualne ceny, zamowienie je zamraza.
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient | None = None,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
        pricing: PricingConfig | None = None,
    ):
        self.cart_repo = CartRepo(db)
        self.repo = OrderRepo(db)
        self.product_client = product_client
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()
        self.pricing = pricing or default_pricing()

    def place_order(
        self,
        owner: CartOwner,
        shipping_address: Dict[str, Any],
        payment: PaymentResult,
        email: str | None,
        discount: Decimal = Decimal("0.00"),
    ) -> Dict[str, Any]:
        """
        Use Case: Tworzenie zamówienia z koszyka.

        1. Czyta linie koszyka (pusty -> EmptyCart)
        2. Zamraza dane produktow z katalogu w OrderLineSnapshot
        3. Liczy subtotal / shipping / tax / total
        4. Odrzuca nieudana platnosc (PaymentDeclined) - koszyk nietkniety
        5. W jednej transakcji: zabiera linie koszyka, zapisuje zamowienie i linie
        6. Wysyła potwierdzenie (async)
        """
        email = (email or "").strip()
        if not email:
            raise ValidationFailed("email", "Email jest wymagany")

        # jeden checkout naraz dla danego koszyka (podwojny submit)
        lock_key = f"checkout:{owner.kind}:{owner.key}"
        token = secrets.token_hex(8)
        if not self.lock_service.acquire(lock_key, token, CHECKOUT_LOCK_TTL_SECONDS):
            raise CheckoutInProgress("Zamowienie dla tego koszyka jest juz przetwarzane")

        try:
            order = self._place_order(owner, shipping_address, payment, email, discount)
        finally:
            self.lock_service.release(lock_key, token)

        logger.info(
            f"Order {order.order_number} created from cart {describe(owner)}, total {order.total}"
        )

        # Wyślij powiadomienie asynchronicznie, dopiero po commicie
        self.notification_service.send_order_confirmation(order.order_number, order.email)

        return order_to_dict(order)

    def _place_order(
        self,
        owner: CartOwner,
        shipping_address: Dict[str, Any],
        payment: PaymentResult,
        email: str,
        discount: Decimal,
    ) -> OrderModel:
        lines = self.cart_repo.get_lines(owner)
        if not lines:
            raise EmptyCart("Koszyk jest pusty")

        snapshots = [self._snapshot(line) for line in lines]
        totals = compute_totals(snapshots, self.pricing, discount)

        if not payment.succeeded:
            logger.info(f"Payment declined for cart {describe(owner)}: {payment.reason}")
            raise PaymentDeclined(payment.reason or "Platnosc zostala odrzucona")

        expected = Counter((l.product_id, l.quantity, l.size, l.color) for l in lines)

        try:
            claimed = self.cart_repo.claim_lines(owner)
            if Counter(claimed) != expected:
                raise CartChanged("Koszyk zmienil sie w trakcie skladania zamowienia")

            order = OrderModel(
                order_number=self._new_order_number(),
                owner_user_id=owner.id if isinstance(owner, User) else None,
                email=email,
                guest_session_id=owner.session_id if isinstance(owner, Guest) else None,
                status=OrderStatus.PENDING.value,
                subtotal=totals.subtotal,
                shipping_fee=totals.shipping_fee,
                tax=totals.tax,
                discount=totals.discount,
                total=totals.total,
                shipping_first_name=shipping_address["first_name"],
                shipping_last_name=shipping_address["last_name"],
                shipping_address_line1=shipping_address["address_line1"],
                shipping_address_line2=shipping_address.get("address_line2"),
                shipping_city=shipping_address["city"],
                shipping_state=shipping_address["state"],
                shipping_zip_code=shipping_address["zip_code"],
                shipping_country=shipping_address.get("country") or "United States",
                shipping_phone=shipping_address.get("phone"),
                payment_method=payment.payment_method,
                payment_intent_id=payment.payment_intent_id,
            )
            order.lines = [
                OrderLineModel(
                    product_id=s.product_id,
                    product_name=s.product_name,
                    product_image_url=s.product_image_url,
                    unit_price=s.unit_price,
                    quantity=s.quantity,
                    size=s.size,
                    color=s.color,
                    sku=s.sku,
                )
                for s in snapshots
            ]

            self.repo.add_order(order)
            self.repo.commit()
        except IntegrityError as e:
            # ten sam numer zapisal rownolegle inny checkout; linie koszyka wracaja
            logger.warning(f"Kolizja numeru zamowienia dla {describe(owner)}: {e}")
            self.repo.rollback()
            raise OrderNumberConflict("Numer zamowienia jest juz zajety, sprobuj ponownie")
        except Exception as e:
            logger.error(f"Blad podczas skladania zamowienia dla {describe(owner)}: {e}")
            self.repo.rollback()
            raise

        self.repo.refresh(order)
        return order

    def _snapshot(self, line: CartLineModel) -> OrderLineSnapshot:
        product = self.product_client.fetch_product(line.product_id)
        if product is None:
            # cale zamowienie odpada, zadnej linii nie pomijamy
            raise ProductUnavailable(f"Produkt {line.product_id} nie jest juz dostepny")

        return OrderLineSnapshot(
            product_id=line.product_id,
            product_name=product.name,
            product_image_url=product.image_url,
            unit_price=product.price,
            quantity=line.quantity,
            size=line.size or None,
            color=line.color or None,
            sku=product.sku,
        )

    def _new_order_number(self) -> str:
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            order_number = generate_order_number()
            if not self.repo.order_number_exists(order_number):
                return order_number
        raise OrderNumberConflict("Nie udalo sie wygenerowac unikalnego numeru zamowienia")

    def get_order_by_number(self, order_number: str) -> Dict[str, Any]:
        """
        Use Case: Pobranie zamówienia po numerze (Query), bez logowania.
        """
        order = self.repo.get_by_number(order_number)
        if not order:
            raise OrderNotFound("Zamówienie nie istnieje")
        return order_to_dict(order)

    def list_orders(self, user_id: str) -> list[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_for_user(user_id)]
