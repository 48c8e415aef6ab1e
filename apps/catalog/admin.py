from django.contrib import admin

from .models import Color, Product, ProductVariant, Size


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "product_code", "base_price", "discount_percentage", "is_active")
    search_fields = ("name", "product_code")
    list_filter = ("is_active",)
    inlines = [ProductVariantInline]


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ("id", "sku", "product", "color", "size", "quantity")
    search_fields = ("sku", "product__name")
    list_select_related = ("product", "color", "size")


admin.site.register(Color)
admin.site.register(Size)
