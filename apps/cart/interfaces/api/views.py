from __future__ import annotations

from dataclasses import asdict

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.cart.application.use_cases.add_to_cart import AddToCartCommand, AddToCartUseCase
from apps.cart.application.use_cases.manage_cart import (
    GetCartCommand,
    GetCartUseCase,
    RemoveFromCartCommand,
    RemoveFromCartUseCase,
    UpdateCartItemQuantityCommand,
    UpdateCartItemQuantityUseCase,
)
from apps.cart.application.use_cases.validate_cart_stock import (
    ValidateCartStockCommand,
    ValidateCartStockUseCase,
)
from apps.cart.interfaces.api.serializers import AddToCartSerializer, CartItemSerializer, UpdateCartItemSerializer
from apps.common.interfaces.api.responses import error, from_result, success


class _CartAPIView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "cart"


class CartAPI(_CartAPIView):
    def get(self, request):
        result = GetCartUseCase.execute(GetCartCommand(customer_id=request.user.id))
        if not result.success:
            return from_result(result)
        return success(data={"cart_items": CartItemSerializer(result.cart_items, many=True).data})


class CartItemsAPI(_CartAPIView):
    def post(self, request):
        serializer = AddToCartSerializer(data=request.data)
        if not serializer.is_valid():
            return error(message="Invalid input.", field=next(iter(serializer.errors), None))

        result = AddToCartUseCase.execute(
            AddToCartCommand(
                customer_id=request.user.id,
                variant_id=serializer.validated_data["variant_id"],
                quantity=serializer.validated_data["quantity"],
            )
        )
        if not result.success:
            return from_result(result)
        return success(
            data={"cart_item": CartItemSerializer(result.cart_item).data},
            message=result.message,
            http_status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


class CartItemDetailAPI(_CartAPIView):
    def patch(self, request, cart_item_id: int):
        serializer = UpdateCartItemSerializer(data=request.data)
        if not serializer.is_valid():
            return error(message="Invalid input.", field=next(iter(serializer.errors), None))

        result = UpdateCartItemQuantityUseCase.execute(
            UpdateCartItemQuantityCommand(
                cart_item_id=cart_item_id,
                customer_id=request.user.id,
                quantity=serializer.validated_data["quantity"],
            )
        )
        if not result.success:
            return from_result(result)
        return success(data={"cart_item": CartItemSerializer(result.cart_item).data}, message=result.message)

    def delete(self, request, cart_item_id: int):
        result = RemoveFromCartUseCase.execute(
            RemoveFromCartCommand(cart_item_id=cart_item_id, customer_id=request.user.id)
        )
        if not result.success:
            return from_result(result)
        return success(data={}, message=result.message)


class CartStockAPI(_CartAPIView):
    def get(self, request):
        result = ValidateCartStockUseCase.execute(ValidateCartStockCommand(customer_id=request.user.id))
        if result.error_code is not None:
            return from_result(result)
        return success(
            data={
                "valid": result.valid,
                "error": result.error,
                "out_of_stock": [asdict(line) for line in result.out_of_stock],
            }
        )
