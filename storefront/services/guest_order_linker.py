# storefront/services/guest_order_linker.py
from sqlalchemy.orm import Session

from storefront.domain.errors import ValidationFailed
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class GuestOrderLinker:
    """
    Use Case: gosc zlozyl zamowienie i od razu zalozyl konto w tej samej sesji.
    Podpina jego zamowienia goscia (ten sam email + ta sama sesja) do konta.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def link(self, user_id: str, email: str | None, guest_session_id: str | None) -> int:
        if not email or not email.strip():
            raise ValidationFailed("email", "Konto nie ma adresu email")

        if not guest_session_id:
            return 0

        try:
            linked = self.repo.link_guest_orders(user_id, email, guest_session_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        if linked:
            logger.info(f"Podpieto {linked} zamowien goscia do usera {user_id}")

        return linked
