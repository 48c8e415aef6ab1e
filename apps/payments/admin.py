from django.contrib import admin

from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "gateway", "amount", "currency", "status", "created_at", "completed_at")
    search_fields = ("id", "order__order_number", "hash")
    list_filter = ("status", "gateway")
    list_select_related = ("order",)
