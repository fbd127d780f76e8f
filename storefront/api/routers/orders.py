# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import (
    current_identity,
    get_lock_service,
    get_notification_service,
    get_payment_client,
    get_product_client,
    require_user,
)
from storefront.api.errors import to_http_exception
from storefront.data.database import get_db
from storefront.domain.errors import (
    AuthenticationRequired,
    Forbidden,
    StorefrontError,
    ValidationFailed,
)
from storefront.domain.schemas import (
    LinkGuestOrdersOut,
    OrderCreate,
    OrderListOut,
    OrderOut,
    StatusChangeIn,
)
from storefront.services.address_service import AddressService, validated_address
from storefront.services.guest_order_linker import GuestOrderLinker
from storefront.services.identity import Identity
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.order_status import OrderStatusService
from storefront.services.payment_client import PaymentClient
from storefront.services.product_client import ProductClient

router = APIRouter(prefix="/orders", tags=["orders"])


def _shipping_address(payload: OrderCreate, identity: Identity, db: Session) -> dict:
    if payload.shipping_address is not None:
        return validated_address(payload.shipping_address)

    if payload.address_id is not None:
        if identity.user is None:
            raise AuthenticationRequired("Zapisane adresy wymagaja logowania")
        address = AddressService(db).get_address(identity.user.id, payload.address_id)
        return {
            "first_name": address.first_name,
            "last_name": address.last_name,
            "address_line1": address.address_line1,
            "address_line2": address.address_line2,
            "city": address.city,
            "state": address.state,
            "zip_code": address.zip_code,
            "country": address.country,
            "phone": address.phone,
        }

    raise ValidationFailed("shipping_address", "Adres dostawy jest wymagany")


@router.post("", response_model=OrderOut, status_code=201)
def place_order(
    payload: OrderCreate,
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
    payment_client: PaymentClient = Depends(get_payment_client),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Tworzy zamówienie z koszyka zalogowanego usera albo goscia.
    Wysyła potwierdzenie asynchronicznie.
    """
    svc = OrderService(
        db,
        product_client=product_client,
        lock_service=lock_service,
        notification_service=notification_service,
    )
    try:
        if identity.owner is None:
            raise AuthenticationRequired("Wymagana sesja koszyka")

        shipping_address = _shipping_address(payload, identity, db)

        # zalogowany user: domyslnie email z konta
        email = payload.email
        if not email and identity.user is not None:
            email = identity.user.email

        payment = payment_client.confirm(payload.payment_intent_id, payload.payment_method)

        return svc.place_order(
            owner=identity.owner,
            shipping_address=shipping_address,
            payment=payment,
            email=email,
        )
    except StorefrontError as e:
        raise to_http_exception(e)


@router.get("", response_model=OrderListOut)
def list_my_orders(
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    return {"orders": svc.list_orders(identity.user.id)}


@router.get("/status/{order_number}", response_model=OrderOut)
def lookup_order(
    order_number: str,
    db: Session = Depends(get_db),
):
    """
    Status zamówienia po numerze - bez logowania, tylko dokladne dopasowanie.
    """
    svc = OrderService(db)
    try:
        return svc.get_order_by_number(order_number)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.post("/link-guest-orders", response_model=LinkGuestOrdersOut)
def link_guest_orders(
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Wywolywane raz po rejestracji goscia, ktory wlasnie zlozyl zamowienie."""
    try:
        linked = GuestOrderLinker(db).link(
            identity.user.id,
            identity.user.email,
            identity.guest_session_id,
        )
    except StorefrontError as e:
        raise to_http_exception(e)
    return {"linked_count": linked}


@router.post("/{order_number}/status", response_model=OrderOut)
def change_status(
    order_number: str,
    payload: StatusChangeIn,
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Zmiana statusu przez fulfillment (tylko admin)."""
    try:
        if not identity.user.is_admin:
            raise Forbidden("Tylko administrator moze zmieniac status zamowienia")
        return OrderStatusService(db, notification_service).transition(
            order_number, payload.status, payload.tracking_number
        )
    except StorefrontError as e:
        raise to_http_exception(e)
