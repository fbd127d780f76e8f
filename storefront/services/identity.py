# storefront/services/identity.py
import secrets
from dataclasses import dataclass

from storefront.domain.entities import AuthenticatedUser
from storefront.domain.owner import CartOwner, Guest, User
from storefront.services.auth_client import AuthClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    """
    Wynik rozpoznania wywolujacego dla jednego requestu.

    owner            - User albo Guest; None gdy brak jakiejkolwiek tozsamosci
                       i nie wolno bylo wygenerowac nowej sesji
    user             - zalogowany uzytkownik (id, email, rola) albo None
    guest_session_id - sesja goscia widoczna w requescie (albo nowo wygenerowana);
                       zostaje podana takze przy zalogowanym userze, zeby
                       merge koszyka i linkowanie zamowien mialy skad ja wziac
    minted           - True gdy sesja zostala wlasnie wygenerowana i caller
                       musi ja zapisac (cookie)
    """

    owner: CartOwner | None
    user: AuthenticatedUser | None = None
    guest_session_id: str | None = None
    minted: bool = False


def mint_session_id() -> str:
    return secrets.token_urlsafe(16)


class IdentityResolver:
    """Zalogowany user zawsze wygrywa z sesja goscia. Brak wlasnego stanu."""

    def __init__(self, auth_client: AuthClient):
        self.auth_client = auth_client

    def resolve(
        self,
        auth_token: str | None = None,
        session_cookie: str | None = None,
        session_header: str | None = None,
        mint: bool = True,
    ) -> Identity:
        # naglowek (klienci bez cookies) ma pierwszenstwo przed cookie
        guest_session_id = (session_header or "").strip() or (session_cookie or "").strip() or None

        user = None
        if auth_token:
            user = self.auth_client.fetch_session(auth_token)

        if user:
            return Identity(
                owner=User(user.id),
                user=user,
                guest_session_id=guest_session_id,
            )

        if guest_session_id:
            return Identity(owner=Guest(guest_session_id), guest_session_id=guest_session_id)

        if not mint:
            return Identity(owner=None)

        session_id = mint_session_id()
        logger.info("Wygenerowano nowa sesje goscia")
        return Identity(owner=Guest(session_id), guest_session_id=session_id, minted=True)
