from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError
from django.utils import timezone

from apps.common.domain.results import ErrorCode
from apps.promotions.domain.errors import PromoCodeRejectedError
from apps.promotions.domain.policies import INVALID_CODE, ensure_redeemable, sanitize_code
from apps.promotions.models import PromoCode, PromoCodeUsage

logger = logging.getLogger("storefront.promotions")


@dataclass(frozen=True)
class ValidatePromoCodeCommand:
    customer_id: int
    code: str


@dataclass(frozen=True)
class ValidatePromoCodeResult:
    promo_code: PromoCode | None = None
    remaining_uses: int | None = None
    customer_remaining_uses: int = 0
    error: str | None = None
    error_code: ErrorCode | None = None
    field: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class ValidatePromoCodeUseCase:
    """
    Check whether a customer may apply a coupon code.

    Nothing is recorded here; usage is counted when the order's payment is confirmed.
    """

    @staticmethod
    def execute(cmd: ValidatePromoCodeCommand) -> ValidatePromoCodeResult:
        code = sanitize_code(cmd.code)
        if not code:
            return ValidatePromoCodeResult(error=INVALID_CODE, error_code=ErrorCode.VALIDATION, field="code")

        try:
            promo_code = PromoCode.objects.filter(code=code, deleted_at__isnull=True).first()
            if promo_code is None:
                return ValidatePromoCodeResult(error=INVALID_CODE, error_code=ErrorCode.VALIDATION, field="code")

            customer_uses = PromoCodeUsage.objects.filter(
                promo_code_id=promo_code.id, customer_id=cmd.customer_id
            ).count()

            try:
                ensure_redeemable(promo_code, customer_uses=customer_uses, now=timezone.now())
            except PromoCodeRejectedError as exc:
                if exc.deactivate:
                    PromoCode.objects.filter(id=promo_code.id).update(is_active=False, updated_at=timezone.now())
                return ValidatePromoCodeResult(error=str(exc), error_code=ErrorCode.VALIDATION, field="code")
        except DatabaseError:
            logger.exception("promo_code_validate_failed", extra={"customer_id": cmd.customer_id, "code": code})
            return ValidatePromoCodeResult(error="Failed to validate coupon", error_code=ErrorCode.STORAGE)

        remaining = None
        if promo_code.max_total_uses is not None:
            remaining = promo_code.max_total_uses - promo_code.total_uses
        return ValidatePromoCodeResult(
            promo_code=promo_code,
            remaining_uses=remaining,
            customer_remaining_uses=promo_code.max_uses_per_customer - customer_uses,
        )
