# storefront/services/storage_events.py
import redis

from storefront.repos.client_store import KEY_PREFIX
from storefront.services.session_registry import SessionRegistry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PATTERN = f"{KEY_PREFIX}:*:storage"


class StorageEventListener:
    """
    Nasluch zmian store z innych procesow (odpowiednik zdarzenia `storage`
    miedzy kartami przegladarki). Dziala w watku redis-py.
    """

    def __init__(self, registry: SessionRegistry, redis_client: redis.Redis | None = None):
        self.registry = registry
        self.redis = redis_client or registry.redis
        self._pubsub = None
        self._thread = None

    def _on_message(self, message) -> None:
        self.registry.handle_storage_event(message["channel"], message["data"])

    def start(self) -> None:
        if self._thread is not None:
            return
        self._pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        self._pubsub.psubscribe(**{PATTERN: self._on_message})
        self._thread = self._pubsub.run_in_thread(sleep_time=0.5, daemon=True)
        logger.info(f"Listening for storage events on {PATTERN}")

    def stop(self) -> None:
        if self._thread is None:
            return
        self._thread.stop()
        self._pubsub.close()
        self._thread = None
        self._pubsub = None
        logger.info("Storage event listener stopped")
