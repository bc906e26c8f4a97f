# app/domain/errors.py


class CartError(Exception):
    """Bazowy blad domeny cart, niesie status HTTP dla warstwy api."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CartError):
    status_code = 400


class NotFoundError(CartError):
    status_code = 404


class ConflictError(CartError):
    status_code = 409


class SchemaMismatchError(CartError):
    """Tabela w bazie ma inny klucz niz oczekuje serwis - blad wdrozenia, nie chwilowy."""

    status_code = 500


class TransientStoreError(CartError):
    status_code = 503


class CacheError(Exception):
    """Blad redisa. Nigdy nie wychodzi poza CartCache."""
