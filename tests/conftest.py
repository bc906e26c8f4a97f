# tests/conftest.py
import os

# przed importem app.*, zeby engine i redis nie wskazywaly na dockerowe hosty
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "")

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.data.database import Base
from app.data.models import CartLineModel  # noqa: F401
from app.domain.errors import TransientStoreError
from app.services.cart_cache import CartCache
from app.services.cart_service import CartService


class FakeRedis:
    """Slownik udajacy redisa: get / set(ex=) / delete."""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.calls = []

    def get(self, key):
        self.calls.append(("get", key))
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.calls.append(("set", key))
        self.data[key] = value
        self.ttls[key] = ex
        return True

    def delete(self, key):
        self.calls.append(("delete", key))
        return 1 if self.data.pop(key, None) is not None else 0


class BrokenRedis:
    """Kazda komenda konczy sie bledem polaczenia."""

    def __init__(self):
        self.calls = 0

    def _fail(self, *args, **kwargs):
        self.calls += 1
        raise RedisConnectionError("Connection refused")

    get = set = delete = _fail


class FakeCatalog:
    def __init__(self, products=None):
        self.products = products or {}
        self.get_calls = []
        self.batch_calls = []
        self.fail_batch = False

    def add(self, item_id, store_id, **fields):
        self.products[item_id] = {"id": item_id, "storeId": store_id, **fields}

    def get(self, item_id):
        self.get_calls.append(item_id)
        return self.products.get(item_id)

    def batch_get(self, item_ids):
        self.batch_calls.append(list(item_ids))
        if self.fail_batch:
            raise TransientStoreError("Katalog produktow niedostepny")
        return {i: self.products[i] for i in item_ids if i in self.products}


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return CartCache(fake_redis, ttl=3600, scope_key="")


@pytest.fixture
def catalog():
    c = FakeCatalog()
    c.add("sku-1", "S1", name="Keyboard", price=199.99, quantity=12, category="Peripherals")
    c.add("sku-2", "S2", name="Mouse", price="49.50", quantity=40)
    c.add("sku-3", "S1", name="Monitor", price=899, quantity=3, averageRating=4.5)
    return c


@pytest.fixture
def service(db, catalog, cache):
    return CartService(db=db, product_client=catalog, cache=cache)


@pytest.fixture
def make_service(db, catalog):
    def _fn(cache, **kwargs):
        return CartService(db=db, product_client=catalog, cache=cache, **kwargs)
    return _fn
