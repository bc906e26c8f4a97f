#app/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Header, Query, Request
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import CartError
from app.domain.schemas import AddItemIn, UpdateQuantityIn, EnrichedCart
from app.services.cart_cache import CartCache
from app.services.cart_service import CartService
from app.services.product_client import ProductClient
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])


def get_cart_cache(request: Request) -> CartCache:
    # jeden klient redisa na proces, tworzony w create_app
    return request.app.state.cart_cache


def get_product_client(request: Request) -> ProductClient:
    return request.app.state.product_client


def get_service(
    db: Session = Depends(get_db),
    cache: CartCache = Depends(get_cart_cache),
    product_client: ProductClient = Depends(get_product_client),
) -> CartService:
    return CartService(db=db, product_client=product_client, cache=cache)


def current_user(x_user_id: str = Header(...)) -> str:
    # weryfikacja tokenu jest poza tym serwisem, gateway przekazuje id usera
    return x_user_id


def _http_error(e: CartError) -> HTTPException:
    if e.status_code >= 500:
        logger.error(f"Cart request failed: {e.message}")
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/items", response_model=EnrichedCart)
def get_cart(
    scope: str | None = Query(None),
    user_id: str = Depends(current_user),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.get_cart(user_id, scope)
    except CartError as e:
        raise _http_error(e)


@router.post("/items", response_model=EnrichedCart)
def add_item(
    payload: AddItemIn,
    scope: str | None = Query(None),
    user_id: str = Depends(current_user),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.add_item(user_id, payload.item_id, payload.quantity, scope)
    except CartError as e:
        raise _http_error(e)


@router.patch("/items/{item_id}", response_model=EnrichedCart)
def update_item(
    item_id: str,
    payload: UpdateQuantityIn,
    scope: str | None = Query(None),
    user_id: str = Depends(current_user),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_item_quantity(user_id, item_id, payload.quantity, scope)
    except CartError as e:
        raise _http_error(e)


@router.delete("/items/{item_id}", response_model=EnrichedCart)
def remove_item(
    item_id: str,
    scope: str | None = Query(None),
    user_id: str = Depends(current_user),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.remove_item(user_id, item_id, scope)
    except CartError as e:
        raise _http_error(e)


@router.delete("/items", response_model=EnrichedCart)
def clear_cart(
    scope: str | None = Query(None),
    user_id: str = Depends(current_user),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.clear_cart(user_id, scope)
    except CartError as e:
        raise _http_error(e)
