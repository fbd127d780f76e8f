# storefront/repos/address_repo.py
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from storefront.data.models.address import ShippingAddressModel


class AddressRepo:
    def __init__(self, db: Session):
        self.db = db

    def count_for_user(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(ShippingAddressModel).where(
            ShippingAddressModel.user_id == user_id
        )
        return self.db.execute(stmt).scalar_one()

    def list_for_user(self, user_id: str) -> list[ShippingAddressModel]:
        # domyslny adres pierwszy, reszta wg daty utworzenia
        stmt = (
            select(ShippingAddressModel)
            .where(ShippingAddressModel.user_id == user_id)
            .order_by(
                ShippingAddressModel.is_default.desc(),
                ShippingAddressModel.created_at,
                ShippingAddressModel.id,
            )
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_for_user(self, user_id: str, address_id: int) -> ShippingAddressModel | None:
        stmt = select(ShippingAddressModel).where(
            ShippingAddressModel.id == address_id,
            ShippingAddressModel.user_id == user_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def clear_default(self, user_id: str) -> None:
        stmt = (
            update(ShippingAddressModel)
            .where(
                ShippingAddressModel.user_id == user_id,
                ShippingAddressModel.is_default.is_(True),
            )
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
        self.db.execute(stmt)

    def add(self, address: ShippingAddressModel) -> ShippingAddressModel:
        self.db.add(address)
        self.db.flush()
        return address

    def delete_for_user(self, user_id: str, address_id: int) -> int:
        stmt = (
            delete(ShippingAddressModel)
            .where(
                ShippingAddressModel.id == address_id,
                ShippingAddressModel.user_id == user_id,
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self):
        self.db.commit()

    def refresh(self, address: ShippingAddressModel):
        self.db.refresh(address)

    def rollback(self):
        self.db.rollback()
