# storefront/api/deps.py
from fastapi import Depends, Request

from storefront.domain.errors import AuthenticationRequired, StorefrontError
from storefront.services.auth_client import AuthClient
from storefront.services.identity import Identity, IdentityResolver
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.payment_client import PaymentClient
from storefront.services.product_client import ProductClient
from storefront.api.errors import to_http_exception
from storefront.utils.settings import AUTH_COOKIE, GUEST_SESSION_COOKIE, GUEST_SESSION_HEADER

# klienci zewnetrznych serwisow - nadpisywani w testach przez dependency_overrides


def get_product_client() -> ProductClient:
    return ProductClient()


def get_auth_client() -> AuthClient:
    return AuthClient()


def get_payment_client() -> PaymentClient:
    return PaymentClient()


def get_lock_service() -> LockService:
    return LockService()


def get_notification_service() -> NotificationService:
    return NotificationService()


def _auth_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(AUTH_COOKIE)


def _resolve(request: Request, auth_client: AuthClient, mint: bool) -> Identity:
    resolver = IdentityResolver(auth_client)
    try:
        return resolver.resolve(
            auth_token=_auth_token(request),
            session_cookie=request.cookies.get(GUEST_SESSION_COOKIE),
            session_header=request.headers.get(GUEST_SESSION_HEADER),
            mint=mint,
        )
    except StorefrontError as e:
        raise to_http_exception(e)


def current_identity(
    request: Request,
    auth_client: AuthClient = Depends(get_auth_client),
) -> Identity:
    """Odczyt: bez tozsamosci nie generujemy nowej sesji."""
    return _resolve(request, auth_client, mint=False)


def current_identity_or_mint(
    request: Request,
    auth_client: AuthClient = Depends(get_auth_client),
) -> Identity:
    """Zapis do koszyka: brak tozsamosci -> nowa sesja goscia (cookie w odpowiedzi)."""
    return _resolve(request, auth_client, mint=True)


def require_user(identity: Identity = Depends(current_identity)) -> Identity:
    if identity.user is None:
        raise to_http_exception(AuthenticationRequired("Wymagane logowanie"))
    return identity
