from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from django.db import DatabaseError, transaction

from apps.common.domain.results import ErrorCode
from apps.orders.domain.errors import InvalidOrderStatusError, OrderStatusTransitionError
from apps.orders.domain.status import ensure_transition, parse_status, status_change_note
from apps.orders.models import Order, OrderStatusHistory

logger = logging.getLogger("storefront.orders")


@dataclass(frozen=True)
class UpdateOrderStatusCommand:
    order_id: str
    new_status: str
    admin_id: int | None = None
    notes: str = ""


@dataclass(frozen=True)
class UpdateOrderStatusResult:
    order: Order | None = None
    history: OrderStatusHistory | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    field: str | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.error is None


class UpdateOrderStatusUseCase:
    @staticmethod
    def execute(cmd: UpdateOrderStatusCommand) -> UpdateOrderStatusResult:
        try:
            new_status = parse_status(cmd.new_status)
        except InvalidOrderStatusError as exc:
            return UpdateOrderStatusResult(error=str(exc), error_code=ErrorCode.VALIDATION, field=exc.field)

        try:
            order_id = uuid.UUID(str(cmd.order_id))
        except ValueError:
            return UpdateOrderStatusResult(error="Order not found", error_code=ErrorCode.NOT_FOUND)

        try:
            with transaction.atomic():
                order = Order.objects.select_for_update().filter(id=order_id).first()
                if order is None:
                    return UpdateOrderStatusResult(error="Order not found", error_code=ErrorCode.NOT_FOUND)

                current = order.status
                try:
                    ensure_transition(current, new_status)
                except OrderStatusTransitionError as exc:
                    return UpdateOrderStatusResult(error=str(exc), error_code=ErrorCode.CONFLICT)

                order.status = new_status.value
                order.save(update_fields=["status", "updated_at"])
                history = OrderStatusHistory.objects.create(
                    order=order,
                    status=new_status.value,
                    notes=(cmd.notes or "").strip() or status_change_note(current, new_status),
                    changed_by_id=cmd.admin_id,
                )
        except DatabaseError:
            logger.exception(
                "order_status_update_failed",
                extra={"order_id": str(cmd.order_id), "status": str(new_status)},
            )
            return UpdateOrderStatusResult(error="Failed to update order status", error_code=ErrorCode.STORAGE)

        logger.info(
            "order_status_updated",
            extra={"order_id": str(order.id), "from_status": current, "to_status": new_status.value},
        )
        return UpdateOrderStatusResult(
            order=order,
            history=history,
            message=f"Order status updated to {new_status}",
        )
