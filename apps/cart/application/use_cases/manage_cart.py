from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError
from django.utils import timezone

from apps.cart.application.use_cases.add_to_cart import CartItemResult
from apps.cart.domain.errors import CartValidationError
from apps.cart.domain.policies import validate_quantity
from apps.cart.models import CartItem
from apps.common.domain.results import ErrorCode

logger = logging.getLogger("storefront.cart")


@dataclass(frozen=True)
class GetCartCommand:
    customer_id: int


@dataclass(frozen=True)
class GetCartResult:
    cart_items: list[CartItem] = field(default_factory=list)
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class UpdateCartItemQuantityCommand:
    cart_item_id: int
    customer_id: int
    quantity: int


@dataclass(frozen=True)
class RemoveFromCartCommand:
    cart_item_id: int
    customer_id: int


class GetCartUseCase:
    @staticmethod
    def execute(cmd: GetCartCommand) -> GetCartResult:
        try:
            items = list(
                CartItem.objects.filter(customer_id=cmd.customer_id)
                .select_related(
                    "product_variant",
                    "product_variant__product",
                    "product_variant__color",
                    "product_variant__size",
                )
                .order_by("-added_at", "-id")
            )
        except DatabaseError:
            logger.exception("cart_fetch_failed", extra={"customer_id": cmd.customer_id})
            return GetCartResult(error="Failed to fetch cart", error_code=ErrorCode.STORAGE)
        return GetCartResult(cart_items=items)


class UpdateCartItemQuantityUseCase:
    @staticmethod
    def execute(cmd: UpdateCartItemQuantityCommand) -> CartItemResult:
        try:
            quantity = validate_quantity(cmd.quantity)
        except CartValidationError as exc:
            return CartItemResult(error=str(exc), error_code=ErrorCode.VALIDATION, field=exc.field)

        try:
            updated = CartItem.objects.filter(id=cmd.cart_item_id, customer_id=cmd.customer_id).update(
                quantity=quantity,
                updated_at=timezone.now(),
            )
            if not updated:
                return CartItemResult(error="Cart item not found", error_code=ErrorCode.NOT_FOUND)
            cart_item = CartItem.objects.get(id=cmd.cart_item_id)
        except DatabaseError:
            logger.exception(
                "cart_update_failed",
                extra={"customer_id": cmd.customer_id, "cart_item_id": cmd.cart_item_id},
            )
            return CartItemResult(error="Failed to update cart item", error_code=ErrorCode.STORAGE)
        return CartItemResult(cart_item=cart_item, message="Cart item updated successfully")


class RemoveFromCartUseCase:
    @staticmethod
    def execute(cmd: RemoveFromCartCommand) -> CartItemResult:
        try:
            deleted, _ = CartItem.objects.filter(id=cmd.cart_item_id, customer_id=cmd.customer_id).delete()
        except DatabaseError:
            logger.exception(
                "cart_remove_failed",
                extra={"customer_id": cmd.customer_id, "cart_item_id": cmd.cart_item_id},
            )
            return CartItemResult(error="Failed to remove item from cart", error_code=ErrorCode.STORAGE)
        if not deleted:
            return CartItemResult(error="Cart item not found", error_code=ErrorCode.NOT_FOUND)
        return CartItemResult(message="Item removed from cart")
