# storefront/services/cart_merge.py
from sqlalchemy.orm import Session

from storefront.domain.owner import Guest, User
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartMergeService:
    """
    Use Case: po zalogowaniu / rejestracji przenosi koszyk goscia do usera.

    Linie goscia sa zabierane jednym DELETE ... RETURNING i dodawane do koszyka
    usera tym samym upsertem co add_product (ten sam klucz -> suma ilosci).
    Wszystko w jednej transakcji; tylko w kierunku gosc -> user.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)

    def merge(self, user_id: str, guest_session_id: str | None) -> int:
        if not guest_session_id:
            return 0

        user = User(user_id)
        guest = Guest(guest_session_id)

        try:
            claimed = self.repo.claim_lines(guest)
            for line in claimed:
                self.repo.add_quantity(user, line.product_id, line.quantity, line.size, line.color)
            self.repo.commit()
        except Exception as e:
            logger.error(f"Blad podczas laczenia koszyka sesji z userem {user_id}: {e}")
            self.repo.rollback()
            raise

        if claimed:
            logger.info(f"Polaczono {len(claimed)} linii koszyka goscia z koszykiem usera {user_id}")

        return len(claimed)
