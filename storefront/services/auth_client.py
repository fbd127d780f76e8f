# storefront/services/auth_client.py
import requests
from requests import RequestException

from storefront.domain.entities import AuthenticatedUser
from storefront.domain.errors import ServiceUnavailable
from storefront.utils.retry import http_retry
from storefront.utils.settings import AUTH_SERVICE_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AuthClient:
    """
    Klient dostawcy sesji. Zamienia token sesji na stabilne id uzytkownika
    (plus email i role). Nieznany / wygasly token -> None.
    """

    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or AUTH_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _get_session(self, token: str) -> requests.Response:
        resp = requests.get(
            f"{self.base_url}/sessions/current",
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
        if resp.status_code not in (401, 404):
            resp.raise_for_status()
        return resp

    def fetch_session(self, token: str) -> AuthenticatedUser | None:
        try:
            resp = self._get_session(token)
        except RequestException as e:
            logger.error(f"Auth provider unavailable: {e}")
            raise ServiceUnavailable("Serwis logowania jest niedostepny") from e

        if resp.status_code in (401, 404):
            return None

        user = (resp.json() or {}).get("user")
        if not user or not user.get("id"):
            return None

        return AuthenticatedUser(
            id=str(user["id"]),
            email=user.get("email"),
            role=user.get("role"),
        )
