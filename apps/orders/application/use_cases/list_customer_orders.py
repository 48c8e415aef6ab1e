from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Prefetch

from apps.common.domain.results import ErrorCode
from apps.orders.models import Order, OrderItem

logger = logging.getLogger("storefront.orders")


@dataclass(frozen=True)
class ListCustomerOrdersCommand:
    user_id: int
    page: int = 1
    per_page: int | None = None


@dataclass(frozen=True)
class OrderSummary:
    order: Order
    item_count: int
    total_quantity: int
    items: list[dict]


@dataclass(frozen=True)
class Pagination:
    page: int
    per_page: int
    count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


@dataclass(frozen=True)
class ListCustomerOrdersResult:
    orders: list[OrderSummary] = field(default_factory=list)
    pagination: Pagination | None = None
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def _summarize(order: Order) -> OrderSummary:
    items = list(order.items.all())
    return OrderSummary(
        order=order,
        item_count=len(items),
        total_quantity=sum(item.quantity or 0 for item in items),
        items=[
            {
                "quantity": item.quantity,
                "product_name": item.product_name,
                "banner_image_url": item.product.banner_image_url or None,
            }
            for item in items
        ],
    )


class ListCustomerOrdersUseCase:
    @staticmethod
    def execute(cmd: ListCustomerOrdersCommand) -> ListCustomerOrdersResult:
        per_page = cmd.per_page or getattr(settings, "STOREFRONT_ORDERS_PER_PAGE", 10)
        page = cmd.page
        if page < 1 or per_page < 1:
            return ListCustomerOrdersResult(error="Invalid pagination", error_code=ErrorCode.VALIDATION)

        start = (page - 1) * per_page
        try:
            qs = Order.objects.filter(customer_id=cmd.user_id)
            count = qs.count()
            orders = list(
                qs.prefetch_related(
                    Prefetch("items", queryset=OrderItem.objects.select_related("product").order_by("id"))
                ).order_by("-created_at")[start : start + per_page]
            )
        except DatabaseError:
            logger.exception("order_list_failed", extra={"user_id": cmd.user_id})
            return ListCustomerOrdersResult(error="Failed to fetch orders", error_code=ErrorCode.STORAGE)

        pagination = Pagination(
            page=page,
            per_page=per_page,
            count=count,
            total_pages=math.ceil(count / per_page),
            has_next_page=page * per_page < count,
            has_previous_page=page > 1,
        )
        return ListCustomerOrdersResult(orders=[_summarize(order) for order in orders], pagination=pagination)
