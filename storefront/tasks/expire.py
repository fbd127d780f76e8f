# storefront/tasks/expire.py
from datetime import datetime, timezone, timedelta

from sqlalchemy.orm import Session

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.cart_repo import CartRepo
from storefront.utils.settings import GUEST_SESSION_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def purge_guest_carts(db: Session, now: datetime | None = None) -> int:
    """
    Usuwa koszyki gosci, w ktorych zadna linia nie byla ruszana dluzej niz TTL sesji.
    Liczy sie najnowsza linia sesji: aktywny koszyk nie traci starszych linii.
    Koszyki userow nie wygasaja.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(seconds=GUEST_SESSION_TTL_SECONDS)

    repo = CartRepo(db)
    try:
        deleted = repo.delete_stale_guest_carts(cutoff)
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info(f"Purged {deleted} stale guest cart lines (cutoff {cutoff.isoformat()})")
    return deleted


@celery_app.task(name="storefront.tasks.expire.purge_guest_carts_task")
def purge_guest_carts_task():
    logger.info("Purge guest carts task started")

    db = SessionLocal()
    try:
        return purge_guest_carts(db)
    finally:
        db.close()
