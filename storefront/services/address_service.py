# storefront/services/address_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.address import ShippingAddressModel
from storefront.domain.errors import AddressNotFound, DefaultAddressConflict, ValidationFailed
from storefront.domain.schemas import AddressCreate, AddressIn, AddressUpdate
from storefront.repos.address_repo import AddressRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "address_line1", "city", "state", "zip_code", "country")
OPTIONAL_FIELDS = ("address_line2", "phone")


def clean_address(data: dict) -> dict:
    """Trim pol; puste wymagane pole -> ValidationFailed, puste opcjonalne -> None."""
    cleaned = {}
    for field in REQUIRED_FIELDS:
        if field not in data:
            continue
        value = (data[field] or "").strip()
        if not value:
            raise ValidationFailed(field, f"Pole {field} jest wymagane")
        cleaned[field] = value
    for field in OPTIONAL_FIELDS:
        if field not in data:
            continue
        cleaned[field] = (data[field] or "").strip() or None
    return cleaned


def validated_address(address: AddressIn) -> dict:
    data = clean_address(address.model_dump())
    missing = [f for f in REQUIRED_FIELDS if f not in data]
    if missing:
        raise ValidationFailed(missing[0], f"Pole {missing[0]} jest wymagane")
    return data


class AddressService:
    """Ksiazka adresowa zalogowanego usera. Co najwyzej jeden adres domyslny."""

    def __init__(self, db: Session):
        self.repo = AddressRepo(db)

    def list_addresses(self, user_id: str) -> list[ShippingAddressModel]:
        return self.repo.list_for_user(user_id)

    def get_address(self, user_id: str, address_id: int) -> ShippingAddressModel:
        address = self.repo.get_for_user(user_id, address_id)
        if not address:
            raise AddressNotFound(f"Adres {address_id} nie istnieje")
        return address

    def save_address(self, user_id: str, payload: AddressCreate) -> ShippingAddressModel:
        data = validated_address(payload)

        try:
            # pierwszy adres usera zawsze domyslny
            is_default = payload.is_default or self.repo.count_for_user(user_id) == 0
            if is_default:
                self.repo.clear_default(user_id)

            address = self.repo.add(
                ShippingAddressModel(user_id=user_id, is_default=is_default, **data)
            )
            self.repo.commit()
        except IntegrityError:
            # rownolegly zapis ustawil juz inny domyslny adres
            self.repo.rollback()
            logger.warning(f"Konflikt adresu domyslnego usera {user_id}")
            raise DefaultAddressConflict("Inny adres zostal wlasnie ustawiony jako domyslny")
        except Exception:
            self.repo.rollback()
            raise

        self.repo.refresh(address)
        logger.info(f"Zapisano adres {address.id} usera {user_id} (default={address.is_default})")
        return address

    def update_address(self, user_id: str, address_id: int, payload: AddressUpdate) -> ShippingAddressModel:
        changes = payload.model_dump(exclude_unset=True)
        is_default = changes.pop("is_default", None)
        data = clean_address(changes)

        address = self.get_address(user_id, address_id)

        try:
            if is_default is True:
                self.repo.clear_default(user_id)
                address.is_default = True
            elif is_default is False:
                address.is_default = False

            for field, value in data.items():
                setattr(address, field, value)
            self.repo.commit()
        except IntegrityError:
            # rownolegly zapis ustawil juz inny domyslny adres
            self.repo.rollback()
            logger.warning(f"Konflikt adresu domyslnego usera {user_id}")
            raise DefaultAddressConflict("Inny adres zostal wlasnie ustawiony jako domyslny")
        except Exception:
            self.repo.rollback()
            raise

        self.repo.refresh(address)
        logger.info(f"Zaktualizowano adres {address_id} usera {user_id}")
        return address

    def delete_address(self, user_id: str, address_id: int) -> None:
        # idempotentne; usuniecie domyslnego nie promuje innego adresu
        rowcount = self.repo.delete_for_user(user_id, address_id)
        self.repo.commit()
        if rowcount:
            logger.info(f"Usunieto adres {address_id} usera {user_id}")
