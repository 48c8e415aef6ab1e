from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError

from apps.common.domain.results import ErrorCode
from apps.customers.models import Address

logger = logging.getLogger("storefront.customers")


@dataclass(frozen=True)
class DeleteAddressCommand:
    address_id: int
    customer_id: int


@dataclass(frozen=True)
class DeleteAddressResult:
    error: str | None = None
    error_code: ErrorCode | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.error is None


class DeleteAddressUseCase:
    @staticmethod
    def execute(cmd: DeleteAddressCommand) -> DeleteAddressResult:
        try:
            deleted, _ = Address.objects.filter(id=cmd.address_id, customer_id=cmd.customer_id).delete()
        except DatabaseError:
            logger.exception(
                "address_delete_failed",
                extra={"customer_id": cmd.customer_id, "address_id": cmd.address_id},
            )
            return DeleteAddressResult(error="Failed to delete address", error_code=ErrorCode.STORAGE)

        if not deleted:
            return DeleteAddressResult(error="Address not found", error_code=ErrorCode.NOT_FOUND)
        return DeleteAddressResult(message="Address deleted successfully")
