from __future__ import annotations

from dataclasses import asdict

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.accounts.interfaces.api.permissions import IsAdminRole
from apps.common.interfaces.api.responses import error, from_result, success
from apps.orders.application.use_cases.get_order_details import GetOrderDetailsCommand, GetOrderDetailsUseCase
from apps.orders.application.use_cases.list_customer_orders import (
    ListCustomerOrdersCommand,
    ListCustomerOrdersUseCase,
)
from apps.orders.application.use_cases.update_order_status import (
    UpdateOrderStatusCommand,
    UpdateOrderStatusUseCase,
)
from apps.orders.interfaces.api.serializers import (
    OrderItemSerializer,
    OrderSerializer,
    OrderStatusHistorySerializer,
    UpdateOrderStatusSerializer,
)


def _int_param(request, name: str, default: int | None) -> int | None:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


class OrderListAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        page = _int_param(request, "page", 1)
        per_page = _int_param(request, "per_page", None)
        if page is None or (request.query_params.get("per_page") and per_page is None):
            return error(message="Invalid pagination.", http_status=status.HTTP_400_BAD_REQUEST)

        result = ListCustomerOrdersUseCase.execute(
            ListCustomerOrdersCommand(user_id=request.user.id, page=page, per_page=per_page)
        )
        if not result.success:
            return from_result(result)

        orders = []
        for summary in result.orders:
            payload = OrderSerializer(summary.order).data
            payload["item_count"] = summary.item_count
            payload["total_quantity"] = summary.total_quantity
            payload["items"] = summary.items
            orders.append(payload)
        return success(data={"orders": orders, "pagination": asdict(result.pagination)})


class OrderDetailAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, order_ref: str):
        result = GetOrderDetailsUseCase.execute(GetOrderDetailsCommand(order_ref=order_ref, user_id=request.user.id))
        if not result.success:
            return from_result(result)

        order = OrderSerializer(result.order).data
        order["items"] = OrderItemSerializer(result.items, many=True).data
        order["status_history"] = OrderStatusHistorySerializer(result.status_history, many=True).data
        if result.customer is not None:
            order["customer_name"] = result.customer["name"]
            order["customer_email"] = result.customer["email"]
            order["customer_phone"] = result.customer["phone"]
            order["payment_transactions"] = [
                {
                    "id": str(txn.id),
                    "gateway": txn.gateway,
                    "amount": str(txn.amount),
                    "status": txn.status,
                    "created_at": txn.created_at,
                    "completed_at": txn.completed_at,
                }
                for txn in result.payment_transactions
            ]
        return success(data={"order": order, "role": result.role})


class OrderStatusAPI(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def post(self, request, order_id):
        serializer = UpdateOrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return error(message="Invalid order status", field="status", http_status=status.HTTP_400_BAD_REQUEST)

        result = UpdateOrderStatusUseCase.execute(
            UpdateOrderStatusCommand(
                order_id=str(order_id),
                new_status=serializer.validated_data["status"],
                notes=serializer.validated_data["notes"],
                admin_id=request.user.id,
            )
        )
        if not result.success:
            return from_result(result)
        return success(data={"order": OrderSerializer(result.order).data}, message=result.message)
