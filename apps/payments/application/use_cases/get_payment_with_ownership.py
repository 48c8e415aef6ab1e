from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from django.db import DatabaseError

from apps.common.domain.ownership import belongs_to
from apps.common.domain.results import ErrorCode
from apps.orders.models import OrderItem
from apps.payments.models import PaymentTransaction

logger = logging.getLogger("storefront.payments")

PAYMENT_NOT_FOUND = "Payment not found"


@dataclass(frozen=True)
class GetPaymentWithOwnershipCommand:
    transaction_id: str
    user_id: int


@dataclass(frozen=True)
class PaymentConfirmationResult:
    payment: PaymentTransaction | None = None
    order_items: list[OrderItem] = field(default_factory=list)
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def order_number(self) -> str | None:
        return self.payment.order.order_number if self.payment else None


def _not_found() -> PaymentConfirmationResult:
    return PaymentConfirmationResult(error=PAYMENT_NOT_FOUND, error_code=ErrorCode.NOT_FOUND)


class GetPaymentWithOwnershipUseCase:
    """
    Payment data for the order-confirmation view.

    A missing transaction, a failed lookup and a transaction whose order belongs
    to someone else all produce the same not-found result.
    """

    @staticmethod
    def execute(cmd: GetPaymentWithOwnershipCommand) -> PaymentConfirmationResult:
        try:
            transaction_id = uuid.UUID(str(cmd.transaction_id))
        except ValueError:
            return _not_found()

        try:
            payment = (
                PaymentTransaction.objects.select_related("order")
                .filter(id=transaction_id)
                .first()
            )
            if payment is None:
                return _not_found()
            order_items = list(OrderItem.objects.filter(order_id=payment.order_id).order_by("id"))
        except DatabaseError:
            logger.exception("payment_fetch_failed", extra={"transaction_id": str(transaction_id)})
            return _not_found()

        if not belongs_to(payment, cmd.user_id):
            logger.warning(
                "payment_ownership_rejected",
                extra={"transaction_id": str(transaction_id), "user_id": cmd.user_id},
            )
            return _not_found()

        return PaymentConfirmationResult(payment=payment, order_items=order_items)
