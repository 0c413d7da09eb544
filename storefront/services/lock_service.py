import redis

from storefront.utils.retry import redis_retry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec lock zwolni tylko ten kto go zalozyl


class LockService:
    """
    -blokada wysylki formularza (jedno zgloszenie naraz na klienta i akcje)
    -zwalnianie locka tylko przez wlasciciela
    -atomowosc przy pomocy lua
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    @staticmethod
    def submit_key(client_id: str, action: str) -> str:
        return f"{action}:{client_id}:submit:lock"

    @redis_retry()
    def acquire_submit_lock(self, client_id: str, action: str, owner: str, ttl: int) -> bool:
        key = self.submit_key(client_id, action)
        logger.info(f"Acquire lock {key} for {owner}")
        #SET checkout:abc:submit:lock "<owner>" NX EX 30
        return bool(
            self.redis.set(
                name=key,
                value=owner,
                nx=True, #tylko jesli klucz nie istnieje
                ex=ttl, #wygasa sam, nawet jak proces padnie w trakcie wysylki
            )
        )

    @redis_retry()
    def release_submit_lock(self, client_id: str, action: str, owner: str) -> bool:
        key = self.submit_key(client_id, action)
        logger.info(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)
