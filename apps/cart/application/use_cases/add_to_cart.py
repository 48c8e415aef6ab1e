from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.cart.domain.errors import CartValidationError
from apps.cart.domain.policies import MAX_QUANTITY, validate_quantity
from apps.cart.models import CartItem
from apps.catalog.models import ProductVariant
from apps.common.domain.results import ErrorCode

logger = logging.getLogger("storefront.cart")


@dataclass(frozen=True)
class AddToCartCommand:
    customer_id: int
    variant_id: int
    quantity: int = 1


@dataclass(frozen=True)
class CartItemResult:
    cart_item: CartItem | None = None
    created: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
    field: str | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.error is None


def _increment(*, customer_id, variant_id, quantity: int) -> int:
    return CartItem.objects.filter(
        customer_id=customer_id,
        product_variant_id=variant_id,
        quantity__lte=MAX_QUANTITY - quantity,
    ).update(
        quantity=F("quantity") + quantity,
        updated_at=timezone.now(),
    )


class AddToCartUseCase:
    """
    Insert-or-increment for the (customer, variant) cart line.

    The increment is a single conditional UPDATE; when no line exists the insert
    runs in a savepoint and a concurrent insert that wins the unique constraint
    falls back to the increment, so no quantity is ever lost.
    """

    @staticmethod
    def execute(cmd: AddToCartCommand) -> CartItemResult:
        try:
            quantity = validate_quantity(cmd.quantity)
        except CartValidationError as exc:
            return CartItemResult(error=str(exc), error_code=ErrorCode.VALIDATION, field=exc.field)

        try:
            if not ProductVariant.objects.filter(id=cmd.variant_id).exists():
                return CartItemResult(error="Product variant not found", error_code=ErrorCode.NOT_FOUND)

            created = False
            with transaction.atomic():
                updated = _increment(customer_id=cmd.customer_id, variant_id=cmd.variant_id, quantity=quantity)
                if not updated:
                    try:
                        with transaction.atomic():
                            CartItem.objects.create(
                                customer_id=cmd.customer_id,
                                product_variant_id=cmd.variant_id,
                                quantity=quantity,
                            )
                        created = True
                    except IntegrityError:
                        if not _increment(customer_id=cmd.customer_id, variant_id=cmd.variant_id, quantity=quantity):
                            return CartItemResult(
                                error=f"Quantity must not exceed {MAX_QUANTITY}",
                                error_code=ErrorCode.VALIDATION,
                                field="quantity",
                            )
                cart_item = CartItem.objects.select_related("product_variant").get(
                    customer_id=cmd.customer_id,
                    product_variant_id=cmd.variant_id,
                )
        except DatabaseError:
            logger.exception(
                "cart_add_failed",
                extra={"customer_id": cmd.customer_id, "variant_id": cmd.variant_id},
            )
            return CartItemResult(error="Failed to add item to cart", error_code=ErrorCode.STORAGE)

        message = "Cart item added successfully" if created else "Cart item updated successfully"
        return CartItemResult(cart_item=cart_item, created=created, message=message)
