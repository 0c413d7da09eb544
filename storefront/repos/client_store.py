# storefront/repos/client_store.py
import json
from typing import Any

import redis

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "client"


def client_key(client_id: str, name: str) -> str:
    return f"{KEY_PREFIX}:{client_id}:{name}"


def storage_channel(client_id: str) -> str:
    return f"{KEY_PREFIX}:{client_id}:storage"


class ClientStore:
    """
    Magazyn klucz-wartosc jednego klienta (odpowiednik localStorage przegladarki).
    - klucze w przestrzeni client:<id>:<nazwa>
    - kazdy zapis / usuniecie publikuje sygnal zmiany na kanale klienta
    - bledy redisa ida wyzej, decyduje wywolujacy
    """

    def __init__(self, client_id: str, redis_client: redis.Redis, origin: str = ""):
        self.client_id = client_id
        self.redis = redis_client
        self.origin = origin

    def get(self, name: str) -> str | None:
        return self.redis.get(client_key(self.client_id, name))

    def set(self, name: str, value: str) -> None:
        self.redis.set(client_key(self.client_id, name), value)
        self._changed(name)

    def delete(self, *names: str) -> None:
        if not names:
            return
        self.redis.delete(*(client_key(self.client_id, n) for n in names))
        for name in names:
            self._changed(name)

    def get_json(self, name: str) -> Any:
        raw = self.get(name)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            #uszkodzony wpis usuwamy tak jak przegladarka czysci zepsuty koszyk
            logger.error(f"Corrupt JSON under {client_key(self.client_id, name)}, dropping it")
            self.delete(name)
            return None

    def set_json(self, name: str, value: Any) -> None:
        self.set(name, json.dumps(value, default=str))

    def _changed(self, name: str) -> None:
        self.redis.publish(
            storage_channel(self.client_id),
            json.dumps({"key": name, "origin": self.origin}),
        )
