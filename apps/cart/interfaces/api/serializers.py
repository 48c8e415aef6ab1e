from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from apps.cart.domain.policies import MAX_QUANTITY
from apps.cart.models import CartItem


class AddToCartSerializer(serializers.Serializer):
    variant_id = serializers.IntegerField()
    quantity = serializers.IntegerField(required=False, default=1, max_value=MAX_QUANTITY)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(max_value=MAX_QUANTITY)


class CartItemSerializer(serializers.ModelSerializer):
    variant_id = serializers.IntegerField(source="product_variant_id", read_only=True)
    sku = serializers.CharField(source="product_variant.sku", read_only=True)
    product_id = serializers.IntegerField(source="product_variant.product_id", read_only=True)
    product_name = serializers.CharField(source="product_variant.product.name", read_only=True)
    color = serializers.CharField(source="product_variant.color.name", read_only=True)
    size = serializers.CharField(source="product_variant.size.name", read_only=True)
    unit_price = serializers.SerializerMethodField()

    class Meta:
        model = CartItem
        fields = [
            "id",
            "variant_id",
            "sku",
            "product_id",
            "product_name",
            "color",
            "size",
            "quantity",
            "unit_price",
            "added_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_unit_price(self, obj: CartItem) -> str:
        product = obj.product_variant.product
        discount = Decimal(product.discount_percentage or 0) / Decimal(100)
        return str((product.base_price * (Decimal(1) - discount)).quantize(Decimal("0.01")))
