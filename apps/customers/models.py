from django.conf import settings
from django.db import models
from django.db.models import Q


class Address(models.Model):
    COUNTRY_CAMBODIA = "Cambodia"

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="addresses"
    )
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    phone_number = models.CharField(max_length=20)
    street_address = models.CharField(max_length=200)
    apartment = models.CharField(max_length=50, null=True, blank=True)
    country = models.CharField(max_length=100, default=COUNTRY_CAMBODIA)
    city_province = models.CharField(max_length=100)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_default", "-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer"],
                condition=Q(is_default=True),
                name="uq_address_single_default",
            ),
        ]
        indexes = [
            models.Index(fields=["customer", "created_at"], name="address_customer_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name} - {self.city_province}, {self.country}"
