from __future__ import annotations

from rest_framework import serializers

from apps.payments.models import PaymentTransaction


class PaymentConfirmationSerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = PaymentTransaction
        fields = ["id", "order_id", "order_number", "amount", "currency", "status", "completed_at"]
        read_only_fields = fields


class ConfirmPaymentSerializer(serializers.Serializer):
    callback_data = serializers.JSONField(required=False, allow_null=True, default=None)
