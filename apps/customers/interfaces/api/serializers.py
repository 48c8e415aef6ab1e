from __future__ import annotations

from rest_framework import serializers

from apps.customers.models import Address


class AddressInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100, allow_blank=True)
    last_name = serializers.CharField(max_length=100, allow_blank=True)
    phone_number = serializers.CharField(max_length=32, allow_blank=True)
    street_address = serializers.CharField(max_length=255, allow_blank=True)
    apartment = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    country = serializers.CharField(max_length=100)
    city_province = serializers.CharField(max_length=100)
    is_default = serializers.BooleanField(required=False, default=False)


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = [
            "id",
            "first_name",
            "last_name",
            "phone_number",
            "street_address",
            "apartment",
            "country",
            "city_province",
            "is_default",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
