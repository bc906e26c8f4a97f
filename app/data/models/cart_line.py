# app/data/models/cart_line.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint

from app.data.database import Base


class CartLineModel(Base):
    """Jeden wiersz = jedna pozycja koszyka. Sam koszyk nie ma swojego wiersza."""

    __tablename__ = "cart_lines"

    user_id = Column(String, primary_key=True)
    scope = Column(String, primary_key=True)
    item_id = Column(String, primary_key=True)

    store_id = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_cart_lines_quantity"),)
