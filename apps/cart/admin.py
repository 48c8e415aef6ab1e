from django.contrib import admin

from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "product_variant", "quantity", "added_at", "updated_at")
    search_fields = ("customer__username", "customer__email", "product_variant__sku")
    list_select_related = ("customer", "product_variant")
