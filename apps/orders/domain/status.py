from __future__ import annotations

import secrets
import string
import time
from enum import StrEnum

from .errors import InvalidOrderStatusError, OrderStatusTransitionError


class OrderStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(StrEnum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

_STATUS_NOTES: dict[tuple[str, str], str] = {
    ("PENDING", "CONFIRMED"): "Seller has confirmed your order.",
    ("CONFIRMED", "SHIPPED"): "Your Item has been picked up by courier partner.",
    ("SHIPPED", "DELIVERED"): "Your order has been successfully delivered.",
    ("PENDING", "CANCELLED"): "Order has been cancelled.",
    ("CONFIRMED", "CANCELLED"): "Order has been cancelled.",
    ("SHIPPED", "CANCELLED"): "Order has been cancelled.",
    ("DELIVERED", "CANCELLED"): "Order has been cancelled.",
}

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def is_valid_status(value: str) -> bool:
    return value in OrderStatus._value2member_map_


def can_transition(current: str, target: str) -> bool:
    if not (is_valid_status(current) and is_valid_status(target)):
        return False
    return OrderStatus(target) in ALLOWED_TRANSITIONS[OrderStatus(current)]


def parse_status(value) -> OrderStatus:
    normalized = str(value or "").strip().upper()
    if not is_valid_status(normalized):
        raise InvalidOrderStatusError("Invalid order status")
    return OrderStatus(normalized)


def ensure_transition(current: str, target: OrderStatus) -> None:
    if current == target:
        raise OrderStatusTransitionError(f"Order is already {target}")
    if not can_transition(current, target):
        raise OrderStatusTransitionError(f"Cannot change order status from {current} to {target}")


def status_change_note(from_status: str, to_status: str) -> str:
    return _STATUS_NOTES.get((from_status, to_status), f"Status changed from {from_status} to {to_status}")


def generate_order_number() -> str:
    """`ORD-<last 8 digits of epoch millis>-<6 random chars>`, e.g. `ORD-46400123-X9Y8Z7`."""
    short_timestamp = str(int(time.time() * 1000))[-8:]
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(6))
    return f"ORD-{short_timestamp}-{suffix}"
