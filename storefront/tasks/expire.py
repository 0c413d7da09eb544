# storefront/tasks/expire.py
import json
import time

import redis

from storefront.celery_worker import celery_app
from storefront.domain.schemas import PendingPayment
from storefront.repos.client_store import KEY_PREFIX
from storefront.repos.payment_repo import PENDING_PAYMENT_KEY
from storefront.services.payment_service import is_payment_expired
from storefront.utils.settings import PENDING_PAYMENT_GRACE_SECONDS, REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def get_redis() -> redis.Redis:
    return redis.Redis.from_url(REDIS_URL, decode_responses=True)


def expire_pending_payments(client: redis.Redis, now: float | None = None) -> int:
    """
    Usuwa porzucone PendingPayment: po expires_at sesji + okres karencji.
    Rekordy bez expires_at licza sie od timestamp zapisu.
    """
    now = now if now is not None else time.time()
    removed = 0

    for key in client.scan_iter(match=f"{KEY_PREFIX}:*:{PENDING_PAYMENT_KEY}"):
        raw = client.get(key)
        if raw is None:
            continue
        try:
            pending = PendingPayment.model_validate(json.loads(raw))
        except ValueError:
            logger.warning(f"Dropping unreadable pending payment {key}")
            client.delete(key)
            removed += 1
            continue

        deadline = pending.expires_at or pending.timestamp
        if deadline and not is_payment_expired(deadline + PENDING_PAYMENT_GRACE_SECONDS, now):
            continue

        logger.info(f"Pending payment {pending.payment_id} for order {pending.order_id} abandoned, removing")
        client.delete(key)
        removed += 1

    return removed


@celery_app.task(name="storefront.tasks.expire.expire_pending_payments_task")
def expire_pending_payments_task():
    logger.info("Expire pending payments task started")
    removed = expire_pending_payments(get_redis())
    logger.info(f"Removed {removed} abandoned pending payment(s)")
    return removed
