# storefront/services/notification_service.py
from kombu.exceptions import OperationalError

from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień i przekazywania zamowien dalej.
    Używa Celery do asynchronicznego przetwarzania. Wywolywany dopiero
    po commicie - awaria brokera nie cofa zamowienia.
    """

    @staticmethod
    def _enqueue(task, *args):
        try:
            task.delay(*args)
        except OperationalError as e:
            logger.warning(f"Could not enqueue {task.name}{args}: {e}")

    def send_order_confirmation(self, order_number: str, email: str):
        self._enqueue(send_order_confirmation_task, order_number, email)

    def send_status_update(self, order_number: str, email: str, status: str):
        self._enqueue(send_status_update_task, order_number, email, status)

    def record_completed_order(self, order_number: str, user_id: str, total: str):
        """Przekazuje total dostarczonego zamowienia do programu lojalnosciowego."""
        self._enqueue(record_completed_order_task, order_number, user_id, total)


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(order_number: str, email: str):
    """
    Celery task - w prawdziwym systemie wysłałby email.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] {email}: Order {order_number} received")
    return {"order_number": order_number, "email": email, "status": "sent"}


@celery_app.task(name="storefront.services.notification_service.send_status_update_task")
def send_status_update_task(order_number: str, email: str, status: str):
    logger.info(f"[NOTIFICATION] {email}: Order {order_number} is now {status}")
    return {"order_number": order_number, "email": email, "status": status}


@celery_app.task(name="storefront.services.notification_service.record_completed_order_task")
def record_completed_order_task(order_number: str, user_id: str, total: str):
    """Punkty naliczane sa po stronie programu lojalnosciowego, tu tylko hand-off."""
    logger.info(f"[LOYALTY] User {user_id}: completed order {order_number}, total {total}")
    return {"order_number": order_number, "user_id": user_id, "total": total}
