from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError, transaction

from apps.common.domain.results import ErrorCode
from apps.customers.application.use_cases.create_address import AddressResult, clear_other_defaults
from apps.customers.models import Address

logger = logging.getLogger("storefront.customers")


@dataclass(frozen=True)
class SetDefaultAddressCommand:
    address_id: int
    customer_id: int


class SetDefaultAddressUseCase:
    """
    Make one address the customer's default.

    Clearing the previous default and flagging the target happen in a single
    transaction, so a customer never ends up with two defaults (most recent wins).
    """

    @staticmethod
    def execute(cmd: SetDefaultAddressCommand) -> AddressResult:
        try:
            with transaction.atomic():
                address = (
                    Address.objects.select_for_update()
                    .filter(id=cmd.address_id, customer_id=cmd.customer_id)
                    .first()
                )
                if address is None:
                    return AddressResult(error="Address not found", error_code=ErrorCode.NOT_FOUND)
                clear_other_defaults(customer_id=cmd.customer_id, keep_id=address.id)
                if not address.is_default:
                    address.is_default = True
                    address.save(update_fields=["is_default", "updated_at"])
        except DatabaseError:
            logger.exception(
                "address_set_default_failed",
                extra={"customer_id": cmd.customer_id, "address_id": cmd.address_id},
            )
            return AddressResult(error="Failed to set default address", error_code=ErrorCode.STORAGE)
        return AddressResult(address=address, message="Default address set successfully")
