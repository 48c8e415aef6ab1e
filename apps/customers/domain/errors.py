from __future__ import annotations


class AddressDomainError(ValueError):
    pass


class AddressValidationError(AddressDomainError):
    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field
