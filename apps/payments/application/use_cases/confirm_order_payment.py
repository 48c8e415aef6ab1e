from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.cart.models import CartItem
from apps.catalog.services.inventory_service import InventoryService
from apps.common.domain.results import ErrorCode
from apps.orders.domain.status import PaymentStatus
from apps.orders.models import Order
from apps.payments.models import PaymentTransaction
from apps.promotions.application.services.promo_code_usage import PromoCodeUsageService

logger = logging.getLogger("storefront.payments")


@dataclass(frozen=True)
class ConfirmOrderPaymentCommand:
    transaction_id: str
    callback_data: dict | None = None


@dataclass(frozen=True)
class ConfirmOrderPaymentResult:
    payment: PaymentTransaction | None = None
    already_completed: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class ConfirmOrderPaymentUseCase:
    """
    Bind a completed payment to its order.

    Marks the transaction completed, the order paid, takes the ordered quantities
    out of stock, empties the customer's cart and counts the order's coupon
    redemption in one transaction.
    Re-confirming a completed transaction changes nothing.
    """

    @staticmethod
    def execute(cmd: ConfirmOrderPaymentCommand) -> ConfirmOrderPaymentResult:
        try:
            transaction_id = uuid.UUID(str(cmd.transaction_id))
        except ValueError:
            return ConfirmOrderPaymentResult(error="Transaction not found", error_code=ErrorCode.NOT_FOUND)

        try:
            with transaction.atomic():
                payment = PaymentTransaction.objects.select_for_update().filter(id=transaction_id).first()
                if payment is None:
                    return ConfirmOrderPaymentResult(error="Transaction not found", error_code=ErrorCode.NOT_FOUND)
                if payment.status == PaymentTransaction.STATUS_COMPLETED:
                    return ConfirmOrderPaymentResult(payment=payment, already_completed=True)

                payment.status = PaymentTransaction.STATUS_COMPLETED
                payment.completed_at = timezone.now()
                payment.callback_data = cmd.callback_data
                payment.save(update_fields=["status", "completed_at", "callback_data"])

                order = Order.objects.select_for_update().get(id=payment.order_id)
                order.payment_status = PaymentStatus.PAID.value
                order.save(update_fields=["payment_status", "updated_at"])

                for item in order.items.all():
                    if item.product_variant_id:
                        InventoryService.decrement(variant_id=item.product_variant_id, quantity=item.quantity)

                CartItem.objects.filter(customer_id=order.customer_id).delete()

                if order.promo_code_id:
                    PromoCodeUsageService.record(
                        promo_code_id=order.promo_code_id, customer_id=order.customer_id, order_id=order.id
                    )
        except DatabaseError:
            logger.exception("payment_confirm_failed", extra={"transaction_id": str(transaction_id)})
            return ConfirmOrderPaymentResult(error="Failed to confirm order", error_code=ErrorCode.STORAGE)

        logger.info(
            "payment_confirmed",
            extra={"transaction_id": str(transaction_id), "order_id": str(payment.order_id)},
        )
        return ConfirmOrderPaymentResult(payment=payment)
