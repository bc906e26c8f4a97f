# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List
from datetime import datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """JSON (api i cache) w camelCase, w pythonie snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AddItemIn(CamelModel):
    """Schema dla dodawania produktu do koszyka."""

    # walidacja ilosci w serwisie, zeby api i serwis zwracaly ten sam blad
    item_id: str | None = Field(None, description="ID produktu")
    quantity: int = Field(1, description="Ilosc produktu (>= 1)")


class UpdateQuantityIn(CamelModel):
    """Schema dla zmiany ilosci, 0 usuwa pozycje."""

    quantity: int = Field(1, description="Nowa ilosc, 0 usuwa pozycje")


class CartLine(CamelModel):
    item_id: str
    quantity: int = Field(..., ge=1)
    store_id: str
    updated_at: datetime | None = None


class Cart(CamelModel):
    """
    Agregat koszyka jednego usera (i scope).
    Ten sam ksztalt trafia do redisa jako snapshot.
    """

    user_id: str
    scope: str
    store_id: str | None = None
    items: List[CartLine] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def store_ids(self) -> set[str]:
        return {line.store_id for line in self.items}

    def item_ids(self) -> list[str]:
        return [line.item_id for line in self.items]


class EnrichedCartLine(CartLine):
    """Pozycja koszyka + dane produktu z katalogu (tylko w odpowiedzi)."""

    name: str
    price: float
    image: str
    category: str
    description: str
    average_rating: float
    available_quantity: int | None = None


class EnrichedCart(CamelModel):
    user_id: str
    scope: str
    store_id: str | None = None
    items: List[EnrichedCartLine] = Field(default_factory=list)
    updated_at: datetime
