import redis
from redis.exceptions import RedisError

from storefront.domain.errors import ServiceUnavailable
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
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

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL


class LockService:
    """
    -blokada checkoutu per wlasciciel koszyka (jedno zamowienie naraz)
    -zwalnianie locka tylko przez tego kto go trzyma
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def _set_nx(self, key: str, token: str, ttl: int) -> bool:
        #SET checkout:guest:abc "token" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def _release(self, key: str, token: str) -> bool:
        return bool(self.redis.eval(_RELEASE_LUA, 1, key, token))

    def acquire(self, key: str, token: str, ttl: int) -> bool:
        logger.info(f"Acquire lock {key}")
        try:
            return self._set_nx(key, token, ttl)
        except RedisError as e:
            logger.error(f"Redis unavailable while locking {key}: {e}")
            raise ServiceUnavailable("Serwis blokad jest niedostepny") from e

    def release(self, key: str, token: str) -> bool:
        logger.info(f"Release lock {key}")
        try:
            return self._release(key, token)
        except RedisError as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Failed to release lock {key}: {e}")
            return False
