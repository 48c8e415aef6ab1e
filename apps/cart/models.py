from django.conf import settings
from django.db import models


class CartItem(models.Model):
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="cart_items"
    )
    product_variant = models.ForeignKey(
        "catalog.ProductVariant", on_delete=models.CASCADE, related_name="cart_items"
    )
    quantity = models.PositiveIntegerField(default=1)
    added_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["customer", "product_variant"], name="uq_cart_customer_variant"),
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="ck_cart_quantity_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.customer_id} - {self.product_variant_id} x{self.quantity}"
