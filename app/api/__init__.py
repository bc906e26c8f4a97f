# app/api/__init__.py
from app.api.routers import carts, health

__all__ = ["carts", "health"]
