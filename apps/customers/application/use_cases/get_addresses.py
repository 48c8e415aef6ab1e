from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError

from apps.common.domain.results import ErrorCode
from apps.customers.application.services.address_listing_cache import AddressListingCache
from apps.customers.application.use_cases.create_address import AddressResult
from apps.customers.models import Address

logger = logging.getLogger("storefront.customers")


@dataclass(frozen=True)
class ListAddressesCommand:
    customer_id: int


@dataclass(frozen=True)
class ListAddressesResult:
    addresses: list[Address] = field(default_factory=list)
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class GetAddressCommand:
    customer_id: int
    address_id: int


@dataclass(frozen=True)
class GetDefaultAddressCommand:
    customer_id: int


class ListAddressesUseCase:
    @staticmethod
    def execute(cmd: ListAddressesCommand) -> ListAddressesResult:
        version = AddressListingCache.version(cmd.customer_id)
        cached = AddressListingCache.get(cmd.customer_id, version)
        if cached is not None:
            return ListAddressesResult(addresses=cached)

        try:
            addresses = list(
                Address.objects.filter(customer_id=cmd.customer_id).order_by("-is_default", "-created_at", "-id")
            )
        except DatabaseError:
            logger.exception("address_list_failed", extra={"customer_id": cmd.customer_id})
            return ListAddressesResult(error="Failed to fetch customer addresses", error_code=ErrorCode.STORAGE)

        AddressListingCache.store(cmd.customer_id, version, addresses)
        return ListAddressesResult(addresses=addresses)


class GetAddressUseCase:
    """Both identifiers must match, so another customer's address id reads as not found."""

    @staticmethod
    def execute(cmd: GetAddressCommand) -> AddressResult:
        try:
            address = Address.objects.filter(id=cmd.address_id, customer_id=cmd.customer_id).first()
        except DatabaseError:
            logger.exception(
                "address_fetch_failed",
                extra={"customer_id": cmd.customer_id, "address_id": cmd.address_id},
            )
            return AddressResult(error="Failed to fetch address", error_code=ErrorCode.STORAGE)
        if address is None:
            return AddressResult(error="Address not found", error_code=ErrorCode.NOT_FOUND)
        return AddressResult(address=address)


class GetDefaultAddressUseCase:
    @staticmethod
    def execute(cmd: GetDefaultAddressCommand) -> AddressResult:
        try:
            address = Address.objects.filter(customer_id=cmd.customer_id, is_default=True).first()
        except DatabaseError:
            logger.exception("address_default_fetch_failed", extra={"customer_id": cmd.customer_id})
            return AddressResult(error="Failed to fetch default address", error_code=ErrorCode.STORAGE)
        if address is None:
            return AddressResult(error="Default address not found", error_code=ErrorCode.NOT_FOUND)
        return AddressResult(address=address)
