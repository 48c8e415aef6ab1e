from __future__ import annotations


class CartDomainError(ValueError):
    pass


class CartValidationError(CartDomainError):
    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field
