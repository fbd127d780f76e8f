# storefront/services/order_status.py
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.domain.errors import InvalidTransition, OrderNotFound, ValidationFailed
from storefront.domain.order_status import TERMINAL, OrderStatus, can_transition
from storefront.repos.order_repo import OrderRepo
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import order_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderStatusService:
    """
    Jedyna sciezka zmiany statusu / tracking number / znacznikow czasu
    po utworzeniu zamowienia. Tabela przejsc w domain.order_status.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.repo = OrderRepo(db)
        self.notification_service = notification_service or NotificationService()

    def transition(
        self,
        order_number: str,
        target: OrderStatus,
        tracking_number: str | None = None,
    ) -> Dict[str, Any]:
        target = OrderStatus(target)
        tracking_number = (tracking_number or "").strip() or None

        order = self.repo.get_by_number_for_update(order_number)
        if not order:
            self.repo.rollback()
            raise OrderNotFound("Zamówienie nie istnieje")

        current = OrderStatus(order.status)

        if not can_transition(current, target):
            self.repo.rollback()
            if current in TERMINAL:
                reason = f"Zamowienie w stanie {current.value} nie moze juz zmienic statusu"
            else:
                reason = f"Niedozwolone przejscie {current.value} -> {target.value}"
            raise InvalidTransition(reason)

        if target == OrderStatus.SHIPPED and not tracking_number:
            self.repo.rollback()
            raise ValidationFailed("tracking_number", "Wysylka wymaga numeru przesylki")

        if tracking_number and target != OrderStatus.SHIPPED:
            self.repo.rollback()
            raise ValidationFailed("tracking_number", "Numer przesylki ustawia sie tylko przy wysylce")

        now = datetime.now(timezone.utc)
        try:
            order.status = target.value
            if target == OrderStatus.SHIPPED:
                order.tracking_number = tracking_number
                order.shipped_at = now
            elif target == OrderStatus.DELIVERED:
                order.delivered_at = now
            order.updated_at = now
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order_number}: {current.value} -> {target.value}")

        self.notification_service.send_status_update(order.order_number, order.email, target.value)
        if target == OrderStatus.DELIVERED and order.owner_user_id:
            self.notification_service.record_completed_order(
                order.order_number, order.owner_user_id, str(order.total)
            )

        order = self.repo.get_by_number(order_number)
        return order_to_dict(order)
