from django.conf import settings
from django.db import models
from django.utils import timezone


class PromoCode(models.Model):
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, default="")
    discount_percentage = models.PositiveSmallIntegerField()
    max_uses_per_customer = models.PositiveIntegerField(default=1)
    max_total_uses = models.PositiveIntegerField(null=True, blank=True)
    total_uses = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    valid_from = models.DateTimeField(default=timezone.now)
    valid_until = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(discount_percentage__gte=1, discount_percentage__lte=100),
                name="ck_promo_discount_range",
            ),
        ]

    def __str__(self) -> str:
        return self.code


class PromoCodeUsage(models.Model):
    promo_code = models.ForeignKey(PromoCode, on_delete=models.CASCADE, related_name="usages")
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="promo_code_usages"
    )
    order = models.ForeignKey(
        "orders.Order", on_delete=models.SET_NULL, null=True, blank=True, related_name="promo_code_usages"
    )
    used_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["promo_code", "customer"], name="promo_usage_code_customer_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.promo_code} - {self.customer_id}"
