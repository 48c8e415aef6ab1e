from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError, transaction

from apps.common.domain.results import ErrorCode
from apps.customers.application.services.address_listing_cache import AddressListingCache
from apps.customers.domain.errors import AddressValidationError
from apps.customers.domain.policies import validate_address_fields
from apps.customers.models import Address

logger = logging.getLogger("storefront.customers")


@dataclass(frozen=True)
class CreateAddressCommand:
    customer_id: int
    data: dict


@dataclass(frozen=True)
class AddressResult:
    address: Address | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    field: str | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.error is None


def clear_other_defaults(*, customer_id, keep_id=None) -> int:
    qs = Address.objects.filter(customer_id=customer_id, is_default=True)
    if keep_id is not None:
        qs = qs.exclude(id=keep_id)
    cleared = qs.update(is_default=False)
    if cleared:
        AddressListingCache.invalidate_with_commit(customer_id)
    return cleared


class CreateAddressUseCase:
    @staticmethod
    def execute(cmd: CreateAddressCommand) -> AddressResult:
        try:
            fields = validate_address_fields(cmd.data)
        except AddressValidationError as exc:
            logger.warning("address_validation_failed", extra={"field": exc.field, "customer_id": cmd.customer_id})
            return AddressResult(error=str(exc), error_code=ErrorCode.VALIDATION, field=exc.field)

        try:
            with transaction.atomic():
                if fields.is_default:
                    clear_other_defaults(customer_id=cmd.customer_id)
                address = Address.objects.create(customer_id=cmd.customer_id, **fields.as_model_fields())
        except DatabaseError:
            logger.exception("address_create_failed", extra={"customer_id": cmd.customer_id})
            return AddressResult(error="Failed to create address", error_code=ErrorCode.STORAGE)
        return AddressResult(address=address, message="Address created successfully")
