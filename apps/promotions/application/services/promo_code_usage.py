from __future__ import annotations

from django.db.models import F
from django.utils import timezone

from apps.promotions.models import PromoCode, PromoCodeUsage


class PromoCodeUsageService:
    @staticmethod
    def record(*, promo_code_id: int, customer_id: int, order_id=None) -> PromoCodeUsage:
        """Count one redemption. Callers run this inside their own transaction."""
        usage = PromoCodeUsage.objects.create(
            promo_code_id=promo_code_id, customer_id=customer_id, order_id=order_id
        )
        now = timezone.now()
        PromoCode.objects.filter(id=promo_code_id).update(total_uses=F("total_uses") + 1, updated_at=now)
        PromoCode.objects.filter(
            id=promo_code_id, max_total_uses__isnull=False, total_uses__gte=F("max_total_uses")
        ).update(is_active=False, updated_at=now)
        return usage
