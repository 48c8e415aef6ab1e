from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.common.interfaces.api.responses import error, from_result, success
from apps.customers.application.use_cases.create_address import CreateAddressCommand, CreateAddressUseCase
from apps.customers.application.use_cases.delete_address import DeleteAddressCommand, DeleteAddressUseCase
from apps.customers.application.use_cases.get_addresses import (
    GetAddressCommand,
    GetAddressUseCase,
    GetDefaultAddressCommand,
    GetDefaultAddressUseCase,
    ListAddressesCommand,
    ListAddressesUseCase,
)
from apps.customers.application.use_cases.set_default_address import (
    SetDefaultAddressCommand,
    SetDefaultAddressUseCase,
)
from apps.customers.application.use_cases.update_address import UpdateAddressCommand, UpdateAddressUseCase
from apps.customers.interfaces.api.serializers import AddressInputSerializer, AddressSerializer


class _AddressAPIView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "addresses"


class AddressListCreateAPI(_AddressAPIView):
    def get(self, request):
        result = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=request.user.id))
        if not result.success:
            return from_result(result)
        return success(data={"addresses": AddressSerializer(result.addresses, many=True).data})

    def post(self, request):
        serializer = AddressInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error(message="Invalid input.", http_status=status.HTTP_400_BAD_REQUEST)

        result = CreateAddressUseCase.execute(
            CreateAddressCommand(customer_id=request.user.id, data=dict(serializer.validated_data))
        )
        if not result.success:
            return from_result(result)
        return success(
            data={"address": AddressSerializer(result.address).data},
            message=result.message,
            http_status=status.HTTP_201_CREATED,
        )


class DefaultAddressAPI(_AddressAPIView):
    def get(self, request):
        result = GetDefaultAddressUseCase.execute(GetDefaultAddressCommand(customer_id=request.user.id))
        if not result.success:
            return from_result(result)
        return success(data={"address": AddressSerializer(result.address).data})


class AddressDetailAPI(_AddressAPIView):
    def get(self, request, address_id: int):
        result = GetAddressUseCase.execute(GetAddressCommand(customer_id=request.user.id, address_id=address_id))
        if not result.success:
            return from_result(result)
        return success(data={"address": AddressSerializer(result.address).data})

    def put(self, request, address_id: int):
        serializer = AddressInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error(message="Invalid input.", http_status=status.HTTP_400_BAD_REQUEST)

        result = UpdateAddressUseCase.execute(
            UpdateAddressCommand(
                address_id=address_id,
                customer_id=request.user.id,
                data=dict(serializer.validated_data),
            )
        )
        if not result.success:
            return from_result(result)
        return success(data={"address": AddressSerializer(result.address).data}, message=result.message)

    def delete(self, request, address_id: int):
        result = DeleteAddressUseCase.execute(
            DeleteAddressCommand(address_id=address_id, customer_id=request.user.id)
        )
        if not result.success:
            return from_result(result)
        return success(data={}, message=result.message)


class SetDefaultAddressAPI(_AddressAPIView):
    def post(self, request, address_id: int):
        result = SetDefaultAddressUseCase.execute(
            SetDefaultAddressCommand(address_id=address_id, customer_id=request.user.id)
        )
        if not result.success:
            return from_result(result)
        return success(data={"address": AddressSerializer(result.address).data}, message=result.message)
