from rest_framework import serializers

from apps.promotions.models import PromoCode


class ApplyPromoCodeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=100, allow_blank=True, trim_whitespace=True)


class PromoCodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PromoCode
        fields = ["id", "code", "description", "discount_percentage", "valid_until"]
