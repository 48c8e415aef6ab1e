from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError

from apps.cart.application.use_cases.manage_cart import GetCartCommand, GetCartUseCase
from apps.catalog.services.inventory_service import InventoryService, OutOfStockLine
from apps.common.domain.results import ErrorCode

logger = logging.getLogger("storefront.cart")


@dataclass(frozen=True)
class ValidateCartStockCommand:
    customer_id: int


@dataclass(frozen=True)
class CartStockResult:
    """`valid=False` with no `error_code` is a checkout answer, not a failure."""

    valid: bool
    error: str | None = None
    error_code: ErrorCode | None = None
    out_of_stock: list[OutOfStockLine] = field(default_factory=list)


class ValidateCartStockUseCase:
    @staticmethod
    def execute(cmd: ValidateCartStockCommand) -> CartStockResult:
        cart = GetCartUseCase.execute(GetCartCommand(customer_id=cmd.customer_id))
        if not cart.success:
            return CartStockResult(valid=False, error=cart.error, error_code=cart.error_code)
        if not cart.cart_items:
            return CartStockResult(valid=False, error="Cart is empty")

        try:
            stock = InventoryService.validate_cart_stock(cart.cart_items)
        except DatabaseError:
            logger.exception("cart_stock_check_failed", extra={"customer_id": cmd.customer_id})
            return CartStockResult(valid=False, error="Failed to validate cart stock", error_code=ErrorCode.STORAGE)
        return CartStockResult(valid=stock.valid, error=stock.error, out_of_stock=stock.out_of_stock)
