"""
Payments models.

Represents payment transactions recorded by the payment integration against an
order (initiated, completed, failed, expired).
"""

import uuid

from django.db import models

from apps.orders.models import default_currency


class PaymentTransaction(models.Model):
    """Payment transaction linked to exactly one order."""

    STATUS_INITIATED = "INITIATED"
    STATUS_PENDING = "PENDING"
    STATUS_COMPLETED = "COMPLETED"
    STATUS_FAILED = "FAILED"
    STATUS_EXPIRED = "EXPIRED"

    STATUS_CHOICES = [
        (STATUS_INITIATED, "Initiated"),
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_EXPIRED, "Expired"),
    ]

    GATEWAY_BAKONG_KHQR = "BAKONG_KHQR"
    TYPE_PURCHASE = "PURCHASE"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        "orders.Order", on_delete=models.PROTECT, related_name="payment_transactions"
    )
    gateway = models.CharField(max_length=30, default=GATEWAY_BAKONG_KHQR)
    type = models.CharField(max_length=20, default=TYPE_PURCHASE)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=10, default=default_currency)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_INITIATED)
    hash = models.CharField(max_length=64, blank=True, default="")
    callback_data = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.order} - {self.status}"
