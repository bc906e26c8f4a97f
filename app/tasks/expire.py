# app/tasks/expire.py
from datetime import datetime, timezone, timedelta

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.domain.errors import CartError
from app.repos.cart_repo import CartRepo
from app.services.cart_cache import CartCache
from app.services.cart_service import CartService
from app.services.product_client import ProductClient
from app.utils.settings import CART_ABANDON_AFTER_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


def expire_abandoned_carts(
    session_factory=SessionLocal,
    cache: CartCache | None = None,
    product_client: ProductClient | None = None,
    max_age_seconds: int = CART_ABANDON_AFTER_SECONDS,
    now: datetime | None = None,
) -> int:
    """Czysci koszyki nieruszane dluzej niz max_age_seconds. Zwraca liczbe wyczyszczonych."""
    if max_age_seconds <= 0:
        logger.info("Sprzatanie porzuconych koszykow wylaczone")
        return 0

    cutoff = (now or datetime.now(timezone.utc)) - timedelta(seconds=max_age_seconds)
    cache = cache or CartCache.from_url()
    product_client = product_client or ProductClient()

    db = session_factory()
    try:
        abandoned = CartRepo(db).find_abandoned(cutoff)
        logger.info(f"Found {len(abandoned)} abandoned carts older than {cutoff.isoformat()}")

        service = CartService(db=db, product_client=product_client, cache=cache)
        cleared = 0
        for user_id, scope in abandoned:
            try:
                service.clear_cart(user_id, scope)
                cleared += 1
            except CartError as e:
                logger.warning(f"Failed to clear cart {user_id}/{scope}: {e}")
        return cleared

    finally:
        db.close()


@celery_app.task(name="app.tasks.expire.expire_abandoned_carts_task")
def expire_abandoned_carts_task():
    logger.info("Expire abandoned carts task started")
    return expire_abandoned_carts()
