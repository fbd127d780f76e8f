# storefront/services/payment_client.py
import requests
from requests import RequestException

from storefront.domain.entities import PaymentResult
from storefront.domain.errors import ServiceUnavailable
from storefront.utils.retry import http_retry
from storefront.utils.settings import PAYMENT_SERVICE_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentClient:
    """
    Klient procesora platnosci. Zwraca tylko sygnal sukces / porazka
    dla payment intentu utworzonego wczesniej przez frontend.
    """

    def __init__(self, base_url: str | None = None, timeout: int = 5):
        self.base_url = (base_url or PAYMENT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _get_intent(self, payment_intent_id: str) -> requests.Response:
        resp = requests.get(
            f"{self.base_url}/payment-intents/{payment_intent_id}",
            timeout=self.timeout,
        )
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def confirm(self, payment_intent_id: str, payment_method: str = "card") -> PaymentResult:
        logger.info(f"PaymentClient confirm intent {payment_intent_id}")

        try:
            resp = self._get_intent(payment_intent_id)
        except RequestException as e:
            logger.error(f"Payment processor unavailable: {e}")
            raise ServiceUnavailable("Procesor platnosci jest niedostepny") from e

        if resp.status_code == 404:
            return PaymentResult(
                succeeded=False,
                payment_method=payment_method,
                payment_intent_id=payment_intent_id,
                reason="Nieznany payment intent",
            )

        data = resp.json()
        status = data.get("status")
        return PaymentResult(
            succeeded=status == "succeeded",
            payment_method=payment_method,
            payment_intent_id=payment_intent_id,
            reason=None if status == "succeeded" else data.get("failure_reason") or status,
        )
