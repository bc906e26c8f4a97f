# tests/test_cart_cache.py
from unittest.mock import MagicMock

from redis.exceptions import TimeoutError as RedisTimeoutError

from app.domain.schemas import Cart, CartLine
from app.services.cart_cache import CartCache

from tests.conftest import BrokenRedis


def _cart(scope="default"):
    return Cart(
        user_id="u1",
        scope=scope,
        store_id="S1",
        items=[CartLine(item_id="sku-1", quantity=2, store_id="S1")],
    )


def test_write_then_read(fake_redis):
    cache = CartCache(fake_redis, ttl=120)

    assert cache.write(_cart()) is True
    cached = cache.read("u1", "default")

    assert cached.store_id == "S1"
    assert [(l.item_id, l.quantity, l.store_id) for l in cached.items] == [("sku-1", 2, "S1")]
    assert fake_redis.ttls["cart:u1"] == 120


def test_snapshot_is_camel_case_json(fake_redis):
    CartCache(fake_redis).write(_cart())

    raw = fake_redis.data["cart:u1"]
    assert '"storeId":"S1"' in raw
    assert '"itemId":"sku-1"' in raw


def test_miss_returns_none(fake_redis):
    assert CartCache(fake_redis).read("u1", "default") is None


def test_corrupt_snapshot_is_a_miss(fake_redis):
    fake_redis.data["cart:u1"] = "{not json"

    assert CartCache(fake_redis).read("u1", "default") is None


def test_invalidate(fake_redis):
    cache = CartCache(fake_redis)
    cache.write(_cart())

    assert cache.invalidate("u1", "default") is True
    assert cache.read("u1", "default") is None


def test_errors_never_raise():
    cache = CartCache(BrokenRedis())

    assert cache.read("u1", "default") is None
    assert cache.write(_cart()) is False
    assert cache.invalidate("u1", "default") is False


def test_timeout_is_logged_as_miss(caplog):
    client = MagicMock()
    client.get.side_effect = RedisTimeoutError("Timeout reading from socket")

    with caplog.at_level("WARNING", logger="app.services.cart_cache"):
        assert CartCache(client).read("u1", "default") is None

    assert "fallback" in caplog.text


def test_zero_ttl_skips_write(fake_redis):
    assert CartCache(fake_redis, ttl=0).write(_cart()) is False
    assert fake_redis.data == {}


def test_disabled_cache():
    cache = CartCache(None)

    assert cache.enabled is False
    assert cache.read("u1", "default") is None
    assert cache.write(_cart()) is False
    assert cache.invalidate("u1", "default") is False


def test_from_empty_url_disables_cache():
    assert CartCache.from_url("").enabled is False


def test_from_url_is_lazy():
    # bez komendy redis-py nie otwiera polaczenia
    cache = CartCache.from_url("redis://localhost:6390/0")
    assert cache.enabled is True


def test_keys_with_and_without_scope():
    assert CartCache(None).key_for("u1", "web") == "cart:u1"
    assert CartCache(None, scope_key="scope").key_for("u1", "web") == "cart:u1:web"
