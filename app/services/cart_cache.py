# app/services/cart_cache.py
import redis
from redis.exceptions import RedisError
from pydantic import ValidationError as SnapshotError

from app.domain.errors import CacheError
from app.domain.schemas import Cart
from app.utils.settings import (
    REDIS_URL,
    REDIS_SOCKET_TIMEOUT,
    CART_CACHE_TTL_SECONDS,
    CART_SCOPE_KEY,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartCache:
    """
    Snapshot koszyka w redisie (cache-aside)
    -odczyt: blad = miss
    -zapis/usuniecie: blad = False, nigdy wyjatek
    cache mozna w kazdej chwili stracic, zrodlem prawdy jest baza
    """

    def __init__(
        self,
        client: redis.Redis | None,
        ttl: int = CART_CACHE_TTL_SECONDS,
        scope_key: str = CART_SCOPE_KEY,
    ):
        self.redis = client
        self.ttl = ttl
        self.scope_key = scope_key

    @classmethod
    def from_url(cls, url: str | None = None, **kwargs) -> "CartCache":
        url = REDIS_URL if url is None else url
        if not url:
            logger.warning("REDIS_URL nie ustawiony, cache koszyka wylaczony")
            return cls(None, **kwargs)

        # polaczenie tworzy sie leniwie przy pierwszej komendzie i jest wspoldzielone
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
        )
        return cls(client, **kwargs)

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    def key_for(self, user_id: str, scope: str) -> str:
        if self.scope_key:
            return f"cart:{user_id}:{scope}"
        return f"cart:{user_id}"

    def _call(self, op: str, *args, **kwargs):
        try:
            return getattr(self.redis, op)(*args, **kwargs)
        except RedisError as e:
            raise CacheError(f"redis {op} failed: {e}") from e

    def read(self, user_id: str, scope: str) -> Cart | None:
        if not self.enabled:
            return None

        key = self.key_for(user_id, scope)
        try:
            raw = self._call("get", key)
            if not raw:
                return None
            return Cart.model_validate_json(raw)
        except CacheError as e:
            logger.warning(f"Odczyt {key} z redisa nieudany, fallback do bazy: {e}")
            return None
        except SnapshotError as e:
            logger.warning(f"Uszkodzony snapshot {key}, traktuje jak miss: {e}")
            return None

    def write(self, cart: Cart) -> bool:
        if not self.enabled or self.ttl <= 0:
            return False

        key = self.key_for(cart.user_id, cart.scope)
        try:
            #SET cart:u1 "{...}" EX 3600
            self._call("set", key, cart.model_dump_json(by_alias=True), ex=self.ttl)
            return True
        except CacheError as e:
            logger.warning(f"Zapis {key} do redisa nieudany, dzialam bez cache: {e}")
            return False

    def invalidate(self, user_id: str, scope: str) -> bool:
        if not self.enabled:
            return False

        key = self.key_for(user_id, scope)
        try:
            self._call("delete", key)
            return True
        except CacheError as e:
            logger.warning(f"Usuniecie {key} z redisa nieudane: {e}")
            return False
