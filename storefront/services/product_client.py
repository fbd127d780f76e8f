# storefront/services/product_client.py
import requests
from requests import RequestException

from storefront.domain.entities import CatalogProduct
from storefront.domain.errors import ServiceUnavailable
from storefront.utils.retry import http_retry
from storefront.utils.settings import PRODUCT_SERVICE_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """Klient katalogu produktow (tylko odczyt)."""

    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _get(self, url: str) -> requests.Response:
        resp = requests.get(url, timeout=self.timeout)
        # 404 to odpowiedz, nie blad transportu - bez retry
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def fetch_product(self, product_id: int) -> CatalogProduct | None:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        try:
            resp = self._get(url)
        except RequestException as e:
            logger.error(f"Catalog unavailable for product {product_id}: {e}")
            raise ServiceUnavailable("Katalog produktow jest niedostepny") from e

        if resp.status_code == 404:
            return None
        return CatalogProduct.from_payload(resp.json())
