from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.accounts.interfaces.api.permissions import IsAdminRole
from apps.common.interfaces.api.responses import error, from_result, success
from apps.orders.interfaces.api.serializers import OrderItemSerializer
from apps.payments.application.use_cases.confirm_order_payment import (
    ConfirmOrderPaymentCommand,
    ConfirmOrderPaymentUseCase,
)
from apps.payments.application.use_cases.get_payment_with_ownership import (
    GetPaymentWithOwnershipCommand,
    GetPaymentWithOwnershipUseCase,
)
from apps.payments.interfaces.api.serializers import ConfirmPaymentSerializer, PaymentConfirmationSerializer


class PaymentConfirmationAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, transaction_id):
        result = GetPaymentWithOwnershipUseCase.execute(
            GetPaymentWithOwnershipCommand(transaction_id=str(transaction_id), user_id=request.user.id)
        )
        if not result.success:
            return from_result(result)
        return success(
            data={
                "payment": PaymentConfirmationSerializer(result.payment).data,
                "order_items": OrderItemSerializer(result.order_items, many=True).data,
            }
        )


class ConfirmPaymentAPI(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def post(self, request, transaction_id):
        serializer = ConfirmPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return error(message="Invalid input.", http_status=status.HTTP_400_BAD_REQUEST)

        result = ConfirmOrderPaymentUseCase.execute(
            ConfirmOrderPaymentCommand(
                transaction_id=str(transaction_id),
                callback_data=serializer.validated_data.get("callback_data"),
            )
        )
        if not result.success:
            return from_result(result)
        message = "Payment already confirmed" if result.already_completed else "Payment confirmed successfully"
        return success(data={"status": result.payment.status}, message=message)
