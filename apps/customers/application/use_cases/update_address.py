from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError, transaction

from apps.common.domain.results import ErrorCode
from apps.customers.application.use_cases.create_address import AddressResult, clear_other_defaults
from apps.customers.domain.errors import AddressValidationError
from apps.customers.domain.policies import validate_address_fields
from apps.customers.models import Address

logger = logging.getLogger("storefront.customers")


@dataclass(frozen=True)
class UpdateAddressCommand:
    address_id: int
    customer_id: int
    data: dict


class UpdateAddressUseCase:
    @staticmethod
    def execute(cmd: UpdateAddressCommand) -> AddressResult:
        try:
            fields = validate_address_fields(cmd.data)
        except AddressValidationError as exc:
            logger.warning("address_validation_failed", extra={"field": exc.field, "customer_id": cmd.customer_id})
            return AddressResult(error=str(exc), error_code=ErrorCode.VALIDATION, field=exc.field)

        try:
            with transaction.atomic():
                address = (
                    Address.objects.select_for_update()
                    .filter(id=cmd.address_id, customer_id=cmd.customer_id)
                    .first()
                )
                if address is None:
                    return AddressResult(error="Address not found", error_code=ErrorCode.NOT_FOUND)
                if fields.is_default:
                    clear_other_defaults(customer_id=cmd.customer_id, keep_id=address.id)
                for name, value in fields.as_model_fields().items():
                    setattr(address, name, value)
                address.save()
        except DatabaseError:
            logger.exception(
                "address_update_failed",
                extra={"customer_id": cmd.customer_id, "address_id": cmd.address_id},
            )
            return AddressResult(error="Failed to update address", error_code=ErrorCode.STORAGE)
        return AddressResult(address=address, message="Address updated successfully")
