# storefront/repos/order_repo.py
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # bez commita - commit robi serwis razem z czyszczeniem koszyka
        self.db.add(order)
        self.db.flush()
        return order

    def order_number_exists(self, order_number: str) -> bool:
        stmt = select(OrderModel.id).where(OrderModel.order_number == order_number)
        return self.db.execute(stmt).first() is not None

    def get_by_number(self, order_number: str) -> OrderModel | None:
        # tylko dokladne dopasowanie, bez LIKE / zakresow
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.order_number == order_number)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_number_for_update(self, order_number: str) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .where(OrderModel.order_number == order_number)
            .with_for_update()
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: str) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.owner_user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def link_guest_orders(self, user_id: str, email: str, guest_session_id: str) -> int:
        """
        Jeden UPDATE z warunkiem owner_user_id IS NULL - zamowienie
        mozna podpiac tylko raz, drugi przebieg nic nie zmienia.
        """
        stmt = (
            update(OrderModel)
            .where(
                OrderModel.owner_user_id.is_(None),
                OrderModel.guest_session_id == guest_session_id,
                func.lower(OrderModel.email) == email.strip().lower(),
            )
            .values(owner_user_id=user_id, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self):
        self.db.commit()

    def refresh(self, order: OrderModel):
        self.db.refresh(order)

    def rollback(self):
        self.db.rollback()
