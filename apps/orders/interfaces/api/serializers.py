from __future__ import annotations

from rest_framework import serializers

from apps.orders.domain.status import OrderStatus
from apps.orders.models import Order, OrderItem, OrderStatusHistory


class OrderItemSerializer(serializers.ModelSerializer):
    banner_image_url = serializers.CharField(source="product.banner_image_url", read_only=True)
    product_code = serializers.CharField(source="product.product_code", read_only=True)
    color = serializers.CharField(source="color.name", read_only=True)
    size = serializers.CharField(source="size.name", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_variant_id",
            "product_name",
            "product_code",
            "banner_image_url",
            "color",
            "size",
            "quantity",
            "unit_price",
            "discount_percentage",
            "total_price",
        ]
        read_only_fields = fields


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["id", "status", "notes", "changed_at", "changed_by_id"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "payment_status",
            "payment_method",
            "promo_code_id",
            "subtotal",
            "discount_amount",
            "total_amount",
            "currency",
            "shipping_address",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[status.value for status in OrderStatus])
    notes = serializers.CharField(required=False, allow_blank=True, default="")
