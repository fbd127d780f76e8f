# storefront/repos/cart_repo.py
from datetime import datetime, timezone
from typing import NamedTuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.domain.owner import CartOwner, Guest

_KEY_COLUMNS = ["owner_kind", "owner_key", "product_id", "size", "color"]


class ClaimedLine(NamedTuple):
    product_id: int
    quantity: int
    size: str
    color: str


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _owned_by(self, owner: CartOwner):
        return (
            CartLineModel.owner_kind == owner.kind,
            CartLineModel.owner_key == owner.key,
        )

    def _insert(self):
        # INSERT ... ON CONFLICT jest zalezny od dialektu
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise RuntimeError(f"Upsert not supported for dialect {dialect}")

    # odczyt

    def get_lines(self, owner: CartOwner) -> list[CartLineModel]:
        stmt = (
            select(CartLineModel)
            .where(*self._owned_by(owner))
            .order_by(CartLineModel.created_at, CartLineModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    # zapis

    def add_quantity(
        self,
        owner: CartOwner,
        product_id: int,
        quantity: int,
        size: str = "",
        color: str = "",
    ) -> None:
        """
        Atomowy upsert: nowa linia albo quantity = quantity + excluded.quantity.
        Dwa rownolegle dodania tego samego klucza sumuja sie w bazie.
        """
        now = datetime.now(timezone.utc)
        insert = self._insert()
        stmt = insert(CartLineModel).values(
            owner_kind=owner.kind,
            owner_key=owner.key,
            product_id=product_id,
            quantity=quantity,
            size=size,
            color=color,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=_KEY_COLUMNS,
            set_={
                "quantity": CartLineModel.__table__.c.quantity + stmt.excluded.quantity,
                "updated_at": now,
            },
        )
        self.db.execute(stmt)

    def set_quantity(self, owner: CartOwner, line_id: int, quantity: int) -> int:
        stmt = (
            update(CartLineModel)
            .where(CartLineModel.id == line_id, *self._owned_by(owner))
            .values(quantity=quantity, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def delete_line(self, owner: CartOwner, line_id: int) -> int:
        stmt = (
            delete(CartLineModel)
            .where(CartLineModel.id == line_id, *self._owned_by(owner))
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def claim_lines(self, owner: CartOwner) -> list[ClaimedLine]:
        """
        DELETE ... RETURNING: zabiera wszystkie linie wlasciciela w jednej operacji.
        Rownolegla transakcja, ktora przyjdzie druga, nie dostanie juz zadnych wierszy.
        """
        stmt = (
            delete(CartLineModel)
            .where(*self._owned_by(owner))
            .returning(
                CartLineModel.product_id,
                CartLineModel.quantity,
                CartLineModel.size,
                CartLineModel.color,
            )
            .execution_options(synchronize_session=False)
        )
        return [ClaimedLine(*row) for row in self.db.execute(stmt).all()]

    def delete_stale_guest_carts(self, cutoff: datetime) -> int:
        """
        Usuwa cale koszyki gosci, w ktorych zadna linia nie byla ruszana od cutoff.
        Jedna swieza linia chroni caly koszyk sesji.
        """
        stale_sessions = (
            select(CartLineModel.owner_key)
            .where(CartLineModel.owner_kind == Guest.kind)
            .group_by(CartLineModel.owner_key)
            .having(func.max(CartLineModel.updated_at) < cutoff)
        )
        stmt = (
            delete(CartLineModel)
            .where(
                CartLineModel.owner_kind == Guest.kind,
                CartLineModel.owner_key.in_(stale_sessions),
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
