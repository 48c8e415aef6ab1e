from __future__ import annotations

from dataclasses import dataclass, field

from django.db.models import F

from ..models import ProductVariant


@dataclass(frozen=True)
class OutOfStockLine:
    variant_id: int
    sku: str
    available: int
    requested: int
    product_name: str


@dataclass(frozen=True)
class StockValidation:
    valid: bool
    error: str | None = None
    out_of_stock: list[OutOfStockLine] = field(default_factory=list)


class InventoryService:
    @staticmethod
    def decrement(*, variant_id: int, quantity: int) -> int:
        """Subtract `quantity` from the variant's stock without going below zero; returns rows touched."""
        updated = ProductVariant.objects.filter(id=variant_id, quantity__gte=quantity).update(
            quantity=F("quantity") - quantity
        )
        if not updated:
            updated = ProductVariant.objects.filter(id=variant_id).update(quantity=0)
        return updated

    @staticmethod
    def validate_cart_stock(lines) -> StockValidation:
        """
        Check every cart line against its variant's current stock.

        `lines` are cart items (anything with `product_variant_id` and `quantity`).
        A missing variant fails fast; shortages are collected and reported together.
        """
        shortages: list[OutOfStockLine] = []
        for line in lines:
            variant = (
                ProductVariant.objects.select_related("product")
                .filter(id=line.product_variant_id)
                .first()
            )
            if variant is None:
                return StockValidation(valid=False, error=f"Product variant not found: {line.product_variant_id}")
            if variant.quantity < line.quantity:
                shortages.append(
                    OutOfStockLine(
                        variant_id=variant.id,
                        sku=variant.sku,
                        available=variant.quantity,
                        requested=line.quantity,
                        product_name=variant.product.name,
                    )
                )

        if shortages:
            message = "; ".join(
                f"{item.product_name}: only {item.available} available, requested {item.requested}"
                for item in shortages
            )
            return StockValidation(valid=False, error=message, out_of_stock=shortages)
        return StockValidation(valid=True)
