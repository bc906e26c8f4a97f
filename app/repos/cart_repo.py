# app/repos/cart_repo.py
from datetime import datetime, timezone
from functools import wraps

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError, OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from app.data.models.cart_line import CartLineModel
from app.domain.errors import SchemaMismatchError, TransientStoreError
from app.utils.settings import CART_BATCH_WRITE_LIMIT
from app.utils.logging import get_logger

logger = get_logger(__name__)

SCHEMA_HINT = (
    "Niezgodny schemat tabeli cart_lines: oczekiwany klucz glowny "
    "(user_id, scope, item_id) typu String oraz kolumny store_id, quantity, updated_at. "
    "Odtworz tabele z tym schematem."
)

# komunikaty sqlite / postgres gdy tabela lub kolumna klucza nie pasuje
_SCHEMA_MARKERS = (
    "no such table",
    "no such column",
    "has no column named",
    'relation "cart_lines" does not exist',
    "undefinedtable",
    "undefinedcolumn",
)


def _is_schema_error(exc: SQLAlchemyError) -> bool:
    if not isinstance(exc, (OperationalError, ProgrammingError)):
        return False
    message = str(exc).lower()
    if any(marker in message for marker in _SCHEMA_MARKERS):
        return True
    # postgres: column cart_lines.scope does not exist
    return "column" in message and "does not exist" in message


def store_call(fn):
    """Tlumaczy bledy SQLAlchemy na bledy domeny (schemat vs chwilowe)."""

    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            if _is_schema_error(e):
                logger.error(f"{SCHEMA_HINT} ({e.__class__.__name__}: {e})")
                raise SchemaMismatchError(SCHEMA_HINT) from e
            logger.warning(f"Blad bazy w {fn.__name__}: {e}")
            raise TransientStoreError(f"Blad bazy danych: {e.__class__.__name__}") from e

    return wrapper


def chunked(values: list, size: int = CART_BATCH_WRITE_LIMIT):
    for start in range(0, len(values), size):
        yield values[start:start + size]


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    @store_call
    def query_lines(self, user_id: str, scope: str) -> list[CartLineModel]:
        stmt = (
            select(CartLineModel)
            .where(CartLineModel.user_id == user_id, CartLineModel.scope == scope)
            .order_by(CartLineModel.item_id)
        )
        return list(self.db.execute(stmt).scalars().all())

    @store_call
    def get_line(self, user_id: str, scope: str, item_id: str) -> CartLineModel | None:
        return self.db.get(CartLineModel, (user_id, scope, item_id))

    @store_call
    def put_line(
        self,
        user_id: str,
        scope: str,
        item_id: str,
        store_id: str,
        quantity: int,
    ) -> CartLineModel:
        # upsert: nadpisujemy ilosc, nie dodajemy
        line = self.get_line(user_id, scope, item_id)
        now = datetime.now(timezone.utc)

        if line:
            line.quantity = quantity
            line.store_id = store_id
            line.updated_at = now
        else:
            line = CartLineModel(
                user_id=user_id,
                scope=scope,
                item_id=item_id,
                store_id=store_id,
                quantity=quantity,
                updated_at=now,
            )
            self.db.add(line)

        self.db.commit()
        return line

    @store_call
    def delete_line(self, user_id: str, scope: str, item_id: str) -> int:
        result = self.db.execute(
            delete(CartLineModel).where(
                CartLineModel.user_id == user_id,
                CartLineModel.scope == scope,
                CartLineModel.item_id == item_id,
            )
        )
        self.db.commit()
        return result.rowcount

    @store_call
    def batch_delete_lines(self, user_id: str, scope: str, item_ids: list[str]) -> int:
        """
        Usuwa pozycje paczkami po CART_BATCH_WRITE_LIMIT, kazda paczka osobny commit.
        Blad w srodku przerywa - ponowne wywolanie po prostu usunie reszte.
        """
        deleted = 0
        for chunk in chunked(list(item_ids)):
            result = self.db.execute(
                delete(CartLineModel).where(
                    CartLineModel.user_id == user_id,
                    CartLineModel.scope == scope,
                    CartLineModel.item_id.in_(chunk),
                )
            )
            self.db.commit()
            deleted += result.rowcount
            logger.info(f"Batch delete {len(chunk)} pozycji koszyka {user_id}/{scope}")
        return deleted

    @store_call
    def find_abandoned(self, older_than: datetime) -> list[tuple[str, str]]:
        #koszyki ktorych najnowsza pozycja jest starsza niz cutoff
        stmt = (
            select(CartLineModel.user_id, CartLineModel.scope)
            .group_by(CartLineModel.user_id, CartLineModel.scope)
            .having(func.max(CartLineModel.updated_at) < older_than)
        )
        return [(row.user_id, row.scope) for row in self.db.execute(stmt).all()]
