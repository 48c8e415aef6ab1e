from django.contrib import admin

from .models import Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("status", "notes", "changed_by", "changed_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer", "status", "payment_status", "total_amount", "currency", "created_at")
    search_fields = ("order_number", "customer__username", "customer__email")
    list_filter = ("status", "payment_status")
    list_select_related = ("customer",)
    inlines = [OrderItemInline, OrderStatusHistoryInline]
