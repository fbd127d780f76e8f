# storefront/api/routers/addresses.py
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from storefront.api.deps import require_user
from storefront.api.errors import to_http_exception
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import AddressCreate, AddressOut, AddressUpdate
from storefront.services.address_service import AddressService
from storefront.services.identity import Identity

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.get("", response_model=List[AddressOut])
def list_addresses(identity: Identity = Depends(require_user), db: Session = Depends(get_db)):
    """Domyslny adres zawsze pierwszy."""
    return AddressService(db).list_addresses(identity.user.id)


@router.post("", response_model=AddressOut, status_code=201)
def save_address(
    payload: AddressCreate,
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        return AddressService(db).save_address(identity.user.id, payload)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.patch("/{address_id}", response_model=AddressOut)
def update_address(
    address_id: int,
    payload: AddressUpdate,
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        return AddressService(db).update_address(identity.user.id, address_id, payload)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.delete("/{address_id}", status_code=204)
def delete_address(
    address_id: int,
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
):
    AddressService(db).delete_address(identity.user.id, address_id)
    return Response(status_code=204)
