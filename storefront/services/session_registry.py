# storefront/services/session_registry.py
import json
import threading
import time
import uuid
from typing import Callable, Dict

import redis

from storefront.repos.auth_repo import AuthRepo
from storefront.repos.cart_repo import CartRepo
from storefront.repos.client_store import ClientStore, KEY_PREFIX
from storefront.repos.payment_repo import PaymentRepo
from storefront.services.auth_service import AuthManager
from storefront.services.backend_client import BackendClient
from storefront.services.cart_service import CartManager
from storefront.services.catalog_client import CatalogClient
from storefront.services.lock_service import LockService
from storefront.services.order_service import OrderOrchestrator
from storefront.services.payment_service import PaymentBridge
from storefront.utils.settings import REDIS_URL, SESSION_IDLE_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

BackendFactory = Callable[[Callable[[], str | None]], BackendClient]


class ClientSession:
    """Caly stan jednego klienta, jawnie przekazywany do handlerow."""

    def __init__(
        self,
        client_id: str,
        store: ClientStore,
        backend_factory: BackendFactory,
        lock_service: LockService,
    ):
        self.client_id = client_id
        self.store = store
        self.last_activity = time.time()

        # token czytany leniwie, auth powstaje po backendzie
        self.backend = backend_factory(lambda: self.auth.token)

        self.cart = CartManager(CartRepo(store))
        self.auth = AuthManager(AuthRepo(store), self.backend)
        self.orders = OrderOrchestrator(client_id, self.cart, self.auth, self.backend, lock_service)
        self.payments = PaymentBridge(PaymentRepo(store), self.cart, self.backend)
        self.catalog = CatalogClient(self.backend)

    def hydrate(self) -> None:
        #orders juz slucha auth, wiec zalogowany klient od razu dostaje historie
        self.cart.hydrate()
        self.auth.hydrate()


class SessionRegistry:
    """
    Rejestr sesji klientow w procesie.
    - sesja ladowana ze store przy pierwszym uzyciu
    - bezczynne sesje usuwane po SESSION_IDLE_TTL_SECONDS
    - sygnaly zmian store z innych procesow trafiaja do zaladowanej sesji
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        backend_factory: BackendFactory | None = None,
        idle_ttl: int = SESSION_IDLE_TTL_SECONDS,
    ):
        self.redis = redis_client or redis.Redis.from_url(REDIS_URL, decode_responses=True)
        self.backend_factory = backend_factory or (lambda provider: BackendClient(token_provider=provider))
        self.lock_service = LockService(self.redis)
        self.idle_ttl = idle_ttl
        self.instance_id = uuid.uuid4().hex
        self._sessions: Dict[str, ClientSession] = {}
        self._lock = threading.Lock()

    def get(self, client_id: str) -> ClientSession:
        with self._lock:
            self._gc_expired()
            session = self._sessions.get(client_id)

        if session is None:
            #hydrate moze wolac backend (historia zamowien), wiec poza lockiem rejestru
            loaded = self._load(client_id)
            with self._lock:
                session = self._sessions.setdefault(client_id, loaded)
            if session is loaded:
                logger.info(f"Session {client_id} hydrated from store")

        session.last_activity = time.time()
        return session

    def _load(self, client_id: str) -> ClientSession:
        store = ClientStore(client_id, self.redis, origin=self.instance_id)
        session = ClientSession(client_id, store, self.backend_factory, self.lock_service)
        session.hydrate()
        return session

    def drop(self, client_id: str) -> None:
        with self._lock:
            self._sessions.pop(client_id, None)

    def handle_storage_event(self, channel: str, data: str) -> None:
        try:
            event = json.loads(data)
        except ValueError:
            logger.warning(f"Ignoring malformed storage event on {channel}")
            return

        #zmiany opublikowane przez ten proces juz sa w pamieci
        if event.get("origin") == self.instance_id:
            return

        parts = channel.split(":")
        if len(parts) != 3 or parts[0] != KEY_PREFIX:
            return
        client_id = parts[1]

        with self._lock:
            session = self._sessions.get(client_id)
        if session is not None:
            session.auth.handle_storage_change(event.get("key", ""))

    def _gc_expired(self) -> None:
        if self.idle_ttl <= 0:
            return
        now = time.time()
        expired = [cid for cid, s in self._sessions.items() if now - s.last_activity > self.idle_ttl]
        for cid in expired:
            self._sessions.pop(cid, None)
        if expired:
            logger.info(f"GC cleared {len(expired)} idle session(s)")
