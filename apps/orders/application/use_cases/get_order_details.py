from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from django.db import DatabaseError
from django.db.models import Prefetch

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.errors import AccountNotFoundError, InvalidRoleError
from apps.accounts.models import AccountProfile
from apps.common.domain.ownership import belongs_to
from apps.common.domain.results import ErrorCode
from apps.orders.models import Order, OrderItem

logger = logging.getLogger("storefront.orders")


@dataclass(frozen=True)
class GetOrderDetailsCommand:
    order_ref: str
    user_id: int


@dataclass(frozen=True)
class OrderDetailsResult:
    order: Order | None = None
    role: str | None = None
    items: list = field(default_factory=list)
    status_history: list = field(default_factory=list)
    payment_transactions: list = field(default_factory=list)
    customer: dict | None = None
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def _order_lookup(order_ref: str) -> dict:
    """An order reference is either the order's UUID or its order number."""
    try:
        return {"id": uuid.UUID(str(order_ref))}
    except ValueError:
        return {"order_number": str(order_ref).strip()}


def _customer_summary(order: Order) -> dict:
    customer = order.customer
    profile = AccountProfile.objects.filter(user_id=customer.id).first()
    if profile and profile.full_name:
        name = profile.full_name
    else:
        name = customer.get_full_name() or customer.get_username()
    return {
        "id": customer.id,
        "name": name,
        "email": customer.email,
        "phone": profile.phone if profile else None,
    }


class GetOrderDetailsUseCase:
    """
    Order detail view for either the owning customer or an admin.

    Customers only ever see their own orders; a foreign order reads exactly like
    a missing one. Admins additionally get customer contact data and payments.
    """

    @staticmethod
    def execute(cmd: GetOrderDetailsCommand) -> OrderDetailsResult:
        if not cmd.order_ref:
            return OrderDetailsResult(error="Order ID is required", error_code=ErrorCode.VALIDATION)
        if not cmd.user_id:
            return OrderDetailsResult(error="User ID is required", error_code=ErrorCode.VALIDATION)

        try:
            role = AccountIdentityService.get_role(user_id=cmd.user_id)
        except (AccountNotFoundError, InvalidRoleError) as exc:
            logger.warning("order_details_role_unresolved", extra={"user_id": cmd.user_id})
            return OrderDetailsResult(error=str(exc), error_code=ErrorCode.FORBIDDEN)

        is_admin = role == AccountProfile.ROLE_ADMIN
        not_found = "Order not found" if is_admin else "Order not found or you don't have access"

        try:
            order = (
                Order.objects.select_related("customer")
                .prefetch_related(
                    Prefetch(
                        "items",
                        queryset=OrderItem.objects.select_related("product", "color", "size").order_by("id"),
                    ),
                    "status_history__changed_by",
                )
                .filter(**_order_lookup(cmd.order_ref))
                .first()
            )
        except DatabaseError:
            logger.exception("order_details_fetch_failed", extra={"user_id": cmd.user_id})
            return OrderDetailsResult(error="Failed to fetch order details", error_code=ErrorCode.STORAGE)

        if order is None or (not is_admin and not belongs_to(order, cmd.user_id)):
            return OrderDetailsResult(error=not_found, error_code=ErrorCode.NOT_FOUND)

        payment_transactions = []
        customer = None
        if is_admin:
            payment_transactions = list(order.payment_transactions.order_by("-created_at"))
            customer = _customer_summary(order)

        return OrderDetailsResult(
            order=order,
            role=role,
            items=list(order.items.all()),
            status_history=list(order.status_history.all()),
            payment_transactions=payment_transactions,
            customer=customer,
        )
