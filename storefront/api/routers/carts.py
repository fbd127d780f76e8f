#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.api.deps import (
    current_identity,
    current_identity_or_mint,
    get_product_client,
    require_user,
)
from storefront.api.errors import to_http_exception
from storefront.data.database import get_db
from storefront.domain.errors import CartLineNotFound, StorefrontError
from storefront.domain.schemas import CartOut, ItemIn, MergeOut, QuantityIn
from storefront.services.cart_merge import CartMergeService
from storefront.services.cart_service import CartService
from storefront.services.identity import Identity
from storefront.services.product_client import ProductClient
from storefront.utils.settings import GUEST_SESSION_COOKIE, GUEST_SESSION_TTL_SECONDS

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session, product_client: ProductClient):
    return CartService(db=db, product_client=product_client)


def _set_guest_cookie(response: Response, session_id: str):
    response.set_cookie(
        GUEST_SESSION_COOKIE,
        session_id,
        max_age=GUEST_SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        path="/",
    )


@router.get("", response_model=CartOut)
def get_cart(
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    try:
        return svc.get_cart(identity.owner)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.post("", response_model=CartOut)
def add_item(
    payload: ItemIn,
    response: Response,
    identity: Identity = Depends(current_identity_or_mint),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    try:
        cart = svc.add_product(
            owner=identity.owner,
            product_id=payload.product_id,
            quantity=payload.quantity,
            size=payload.size,
            color=payload.color,
        )
    except StorefrontError as e:
        raise to_http_exception(e)

    # gosc: zwroc sesje (cookie + body dla klientow bez cookies)
    if identity.user is None:
        if identity.minted:
            _set_guest_cookie(response, identity.guest_session_id)
        cart["session_id"] = identity.guest_session_id
    return cart


@router.patch("", response_model=CartOut)
def update_quantity(
    payload: QuantityIn,
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    try:
        if identity.owner is None:
            raise CartLineNotFound(f"Linia koszyka {payload.line_id} nie istnieje")
        return svc.update_quantity(identity.owner, payload.line_id, payload.quantity)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.delete("", response_model=CartOut)
def remove_item(
    line_id: int = Query(..., gt=0),
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    svc = get_service(db, product_client)
    if identity.owner is None:
        return svc.get_cart(None)

    try:
        return svc.remove_line(identity.owner, line_id)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.post("/merge", response_model=MergeOut)
def merge_guest_cart(
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
):
    """
    Wywolywane raz po zalogowaniu / rejestracji: koszyk goscia -> koszyk usera.
    Cookie sesji zostaje - potrzebne jeszcze do podpiecia zamowien goscia.
    """
    try:
        merged = CartMergeService(db).merge(identity.user.id, identity.guest_session_id)
        cart = get_service(db, product_client).get_cart(identity.owner)
    except StorefrontError as e:
        raise to_http_exception(e)

    return {"merged_lines": merged, "cart": cart}
