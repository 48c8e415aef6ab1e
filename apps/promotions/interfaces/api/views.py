from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.common.interfaces.api.responses import error, from_result, success
from apps.promotions.application.use_cases.validate_promo_code import (
    ValidatePromoCodeCommand,
    ValidatePromoCodeUseCase,
)
from apps.promotions.interfaces.api.serializers import ApplyPromoCodeSerializer, PromoCodeSerializer


class ApplyPromoCodeAPI(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "coupons"

    def post(self, request):
        serializer = ApplyPromoCodeSerializer(data=request.data)
        if not serializer.is_valid():
            return error(message="Invalid input.", field="code", http_status=status.HTTP_400_BAD_REQUEST)

        result = ValidatePromoCodeUseCase.execute(
            ValidatePromoCodeCommand(customer_id=request.user.id, code=serializer.validated_data["code"])
        )
        if not result.success:
            return from_result(result)
        return success(
            data={
                "coupon": PromoCodeSerializer(result.promo_code).data,
                "remaining_uses": result.remaining_uses,
                "customer_remaining_uses": result.customer_remaining_uses,
            },
            message="Coupon applied",
        )
