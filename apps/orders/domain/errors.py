from __future__ import annotations


class OrderDomainError(ValueError):
    pass


class InvalidOrderStatusError(OrderDomainError):
    def __init__(self, message: str, *, field: str | None = "status"):
        super().__init__(message)
        self.field = field


class OrderStatusTransitionError(OrderDomainError):
    pass
