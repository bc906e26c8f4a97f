# tests/test_cart_api.py
import pytest
from fastapi.testclient import TestClient

from app.data.database import get_db
from app.main import create_app
from app.services.cart_cache import CartCache


@pytest.fixture
def api(db, catalog, fake_redis):
    app = create_app(cart_cache=CartCache(fake_redis), product_client=catalog)

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    return TestClient(app)


USER = {"X-User-Id": "u1"}


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_user_header_is_required(api):
    assert api.get("/cart/items").status_code == 422


def test_cart_flow(api):
    resp = api.post("/cart/items", json={"itemId": "sku-1", "quantity": 2}, headers=USER)
    assert resp.status_code == 200
    body = resp.json()
    assert body["storeId"] == "S1"
    assert body["items"][0]["itemId"] == "sku-1"
    assert body["items"][0]["quantity"] == 2
    assert body["items"][0]["name"] == "Keyboard"
    assert body["items"][0]["availableQuantity"] == 12

    resp = api.post("/cart/items", json={"itemId": "sku-2", "quantity": 1}, headers=USER)
    assert resp.status_code == 409

    body = api.get("/cart/items", headers=USER).json()
    assert [(i["itemId"], i["quantity"]) for i in body["items"]] == [("sku-1", 2)]

    body = api.delete("/cart/items/sku-1", headers=USER).json()
    assert body == {**body, "storeId": None, "items": []}


def test_default_quantity_is_one(api):
    body = api.post("/cart/items", json={"itemId": "sku-3"}, headers=USER).json()
    assert body["items"][0]["quantity"] == 1


def test_patch_quantity_and_zero_removes(api):
    api.post("/cart/items", json={"itemId": "sku-1"}, headers=USER)

    body = api.patch("/cart/items/sku-1", json={"quantity": 5}, headers=USER).json()
    assert body["items"][0]["quantity"] == 5

    body = api.patch("/cart/items/sku-1", json={"quantity": 0}, headers=USER).json()
    assert body["items"] == []
    assert body["storeId"] is None


def test_clear(api):
    api.post("/cart/items", json={"itemId": "sku-1"}, headers=USER)
    api.post("/cart/items", json={"itemId": "sku-3"}, headers=USER)

    body = api.delete("/cart/items", headers=USER).json()

    assert body["items"] == []
    assert api.get("/cart/items", headers=USER).json()["items"] == []


@pytest.mark.parametrize(
    "payload, status",
    [
        ({"quantity": 1}, 400),
        ({"itemId": "sku-1", "quantity": 0}, 400),
        ({"itemId": "missing", "quantity": 1}, 404),
    ],
)
def test_error_mapping(api, payload, status):
    resp = api.post("/cart/items", json=payload, headers=USER)

    assert resp.status_code == status
    assert resp.json()["detail"]


def test_catalog_outage_on_add_is_503(api, catalog, monkeypatch):
    from app.domain.errors import TransientStoreError

    def down(item_id):
        raise TransientStoreError("Katalog produktow niedostepny")

    monkeypatch.setattr(catalog, "get", down)

    assert api.post("/cart/items", json={"itemId": "sku-1"}, headers=USER).status_code == 503
