from django.contrib import admin

from .models import PromoCode, PromoCodeUsage


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    list_display = ("id", "code", "discount_percentage", "total_uses", "max_total_uses", "is_active", "valid_until")
    search_fields = ("code", "description")
    list_filter = ("is_active",)


@admin.register(PromoCodeUsage)
class PromoCodeUsageAdmin(admin.ModelAdmin):
    list_display = ("id", "promo_code", "customer", "order", "used_at")
    list_select_related = ("promo_code", "customer", "order")
