# app/services/cart_service.py
from sqlalchemy.orm import Session

from app.domain.errors import (
    ValidationError,
    NotFoundError,
    ConflictError,
    TransientStoreError,
)
from app.domain.schemas import Cart, CartLine, EnrichedCart, EnrichedCartLine
from app.repos.cart_repo import CartRepo
from app.services.cart_cache import CartCache
from app.services.product_client import ProductClient
from app.utils.settings import CART_SCOPE_KEY, CART_DEFAULT_SCOPE
from app.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_IMAGE = (
    "https://images.unsplash.com/photo-1441986300917-64674bd600d8"
    "?auto=format&fit=crop&w=800&q=80"
)


def ensure_single_store(cart: Cart, store_id: str) -> None:
    """Koszyk moze zawierac pozycje tylko z jednego sklepu."""
    if cart.is_empty:
        return
    if cart.store_ids() != {store_id}:
        raise ConflictError("Koszyk zawiera juz produkty z innego sklepu")


def _product_store(product: dict) -> str | None:
    store_id = product.get("storeId") or product.get("storefrontId")
    return str(store_id) if store_id else None


class CartService:
    """
    Use case'y koszyka na dwoch warstwach: baza (zrodlo prawdy) + redis (snapshot).
    query (get) czyta z cache, commands (add, update, remove, clear)
    sprawdzaja inwarianty na bazie, zapisuja i odswiezaja cache.
    Brak lockow - przy rownoleglych zapisach wygrywa ostatni.
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        cache: CartCache,
        scope_key: str = CART_SCOPE_KEY,
        default_scope: str = CART_DEFAULT_SCOPE,
    ):
        self.repo = CartRepo(db)
        self.product_client = product_client
        self.cache = cache
        self.scope_key = scope_key
        self.default_scope = default_scope

    def _scope(self, scope: str | None) -> str:
        #bez skonfigurowanego klucza scope zawsze jeden koszyk na usera
        if not self.scope_key or not scope:
            return self.default_scope
        return scope

    #query
    def fetch_cart(self, user_id: str, scope: str | None = None) -> Cart:
        scope = self._scope(scope)
        rows = self.repo.query_lines(user_id, scope)

        items = [
            CartLine(
                item_id=r.item_id,
                quantity=r.quantity,
                store_id=r.store_id,
                updated_at=r.updated_at,
            )
            for r in rows
        ]

        return Cart(
            user_id=user_id,
            scope=scope,
            store_id=items[0].store_id if items else None,
            items=items,
        )

    def get_cart(self, user_id: str, scope: str | None = None) -> EnrichedCart:
        scope = self._scope(scope)
        cart = self.cache.read(user_id, scope)

        if cart is None:
            cart = self.fetch_cart(user_id, scope)
            self.cache.write(cart)

        return self.enrich(cart)

    #commands
    def add_item(
        self,
        user_id: str,
        item_id: str | None,
        quantity: int = 1,
        scope: str | None = None,
    ) -> EnrichedCart:

        # Walidacje przed jakakolwiek zmiana w bazie
        if not item_id:
            raise ValidationError("itemId jest wymagane")
        if quantity is None or quantity < 1:
            raise ValidationError("Ilosc musi byc co najmniej 1")

        scope = self._scope(scope)

        product = self.product_client.get(item_id)
        if not product:
            raise NotFoundError("Produkt nie istnieje")

        store_id = _product_store(product)
        if not store_id:
            raise ValidationError("Produkt nie ma przypisanego sklepu")

        # inwarianty tylko na stanie z bazy, nigdy z cache
        existing = self.fetch_cart(user_id, scope)
        ensure_single_store(existing, store_id)

        logger.info(f"Zapis pozycji {item_id} x{quantity} (sklep {store_id}) w koszyku {user_id}/{scope}")
        self.repo.put_line(user_id, scope, item_id, store_id, quantity)

        fresh = self.fetch_cart(user_id, scope)
        self._check_race(fresh, user_id, scope, item_id)

        self.cache.write(fresh)
        return self.enrich(fresh)

    def _check_race(self, cart: Cart, user_id: str, scope: str, item_id: str) -> None:
        # dwa rownolegle add z roznych sklepow na pustym koszyku - wycofaj swoj zapis
        if len(cart.store_ids()) <= 1:
            return

        logger.warning(
            f"Wykryto mieszane sklepy {sorted(cart.store_ids())} w koszyku {user_id}/{scope}, "
            f"wycofuje pozycje {item_id}"
        )
        self.repo.delete_line(user_id, scope, item_id)
        self.cache.invalidate(user_id, scope)
        raise ConflictError("Koszyk zawiera juz produkty z innego sklepu")

    def update_item_quantity(
        self,
        user_id: str,
        item_id: str | None,
        quantity: int = 1,
        scope: str | None = None,
    ) -> EnrichedCart:
        if quantity is None or quantity < 1:
            return self.remove_item(user_id, item_id, scope)
        return self.add_item(user_id, item_id, quantity, scope)

    def remove_item(self, user_id: str, item_id: str | None, scope: str | None = None) -> EnrichedCart:
        if not item_id:
            raise ValidationError("itemId jest wymagane")

        scope = self._scope(scope)

        logger.info(f"Usuwanie pozycji {item_id} z koszyka {user_id}/{scope}")
        self.repo.delete_line(user_id, scope, item_id)

        fresh = self.fetch_cart(user_id, scope)
        self.cache.write(fresh)

        return self.enrich(fresh)

    def clear_cart(self, user_id: str, scope: str | None = None) -> EnrichedCart:
        scope = self._scope(scope)
        existing = self.fetch_cart(user_id, scope)

        if not existing.is_empty:
            logger.info(f"Czyszczenie koszyka {user_id}/{scope}, {len(existing.items)} pozycji")
            self.repo.batch_delete_lines(user_id, scope, existing.item_ids())

        empty = Cart(user_id=user_id, scope=scope)

        self.cache.invalidate(user_id, scope)
        self.cache.write(empty)

        return self.enrich(empty)

    def enrich(self, cart: Cart) -> EnrichedCart:
        """
        Dokleja aktualne dane produktow (nazwa, cena, zdjecie...) jednym batchem.
        Brak produktu albo niedostepny katalog = wartosci domyslne, nigdy blad.
        """
        products = {}
        if not cart.is_empty:
            try:
                products = self.product_client.batch_get(cart.item_ids())
            except TransientStoreError as e:
                logger.warning(f"Katalog niedostepny przy wzbogacaniu koszyka {cart.user_id}: {e}")

        items = []
        for line in cart.items:
            product = products.get(line.item_id) or {}
            items.append(
                EnrichedCartLine(
                    item_id=line.item_id,
                    quantity=line.quantity,
                    store_id=line.store_id or _product_store(product),
                    updated_at=line.updated_at,
                    name=str(product.get("name") or "Item"),
                    price=_as_number(product.get("price")),
                    image=str(product.get("image") or DEFAULT_IMAGE),
                    category=str(product.get("category") or "General"),
                    description=str(product.get("description") or ""),
                    average_rating=_as_number(product.get("averageRating")),
                    available_quantity=_as_int(product.get("quantity")),
                )
            )

        return EnrichedCart(
            user_id=cart.user_id,
            scope=cart.scope,
            store_id=cart.store_id or (items[0].store_id if items else None),
            items=items,
            updated_at=cart.updated_at,
        )


def _as_number(value) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _as_int(value) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
