from __future__ import annotations

from .errors import CartValidationError

# Largest value a 32-bit signed integer column holds.
MAX_QUANTITY = 2_147_483_647


def validate_quantity(raw) -> int:
    if isinstance(raw, bool):
        raise CartValidationError("Quantity must be a positive integer", field="quantity")
    try:
        quantity = int(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        raise CartValidationError("Quantity must be a positive integer", field="quantity") from exc
    if quantity != raw and not isinstance(raw, str):
        raise CartValidationError("Quantity must be a positive integer", field="quantity")
    if quantity < 1:
        raise CartValidationError("Quantity must be a positive integer", field="quantity")
    if quantity > MAX_QUANTITY:
        raise CartValidationError(f"Quantity must not exceed {MAX_QUANTITY}", field="quantity")
    return quantity
