from __future__ import annotations

import re
from datetime import datetime

from apps.promotions.domain.errors import PromoCodeRejectedError

_WHITESPACE = re.compile(r"\s+")

INVALID_CODE = "Invalid coupon code. Please check the code and try again."
INACTIVE_CODE = "This coupon is no longer active. It may have expired or reached its usage limit."
NOT_YET_VALID = "This coupon is not yet valid and cannot be applied"
EXPIRED = "This coupon has expired and cannot be applied."
USAGE_LIMIT_REACHED = "This coupon has reached its usage limit"
CUSTOMER_LIMIT_REACHED = "You have already used this coupon the maximum number of times"


def sanitize_code(raw) -> str:
    """Codes are matched without whitespace and case-insensitively."""
    if not isinstance(raw, str):
        return ""
    return _WHITESPACE.sub("", raw).upper()


def ensure_redeemable(promo_code, *, customer_uses: int, now: datetime) -> None:
    """
    Raise PromoCodeRejectedError for the first rule the code breaks.

    A code whose total usage limit is already reached is flagged for deactivation.
    """
    if not promo_code.is_active:
        raise PromoCodeRejectedError(INACTIVE_CODE)
    if promo_code.valid_from and now < promo_code.valid_from:
        raise PromoCodeRejectedError(NOT_YET_VALID)
    if promo_code.valid_until and now > promo_code.valid_until:
        raise PromoCodeRejectedError(EXPIRED)
    if promo_code.max_total_uses is not None and promo_code.total_uses >= promo_code.max_total_uses:
        raise PromoCodeRejectedError(USAGE_LIMIT_REACHED, deactivate=True)
    if customer_uses >= promo_code.max_uses_per_customer:
        raise PromoCodeRejectedError(CUSTOMER_LIMIT_REACHED)
