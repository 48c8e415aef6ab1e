from django.contrib import admin

from .models import Address


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "first_name", "last_name", "phone_number", "city_province", "is_default")
    search_fields = ("first_name", "last_name", "phone_number", "customer__username", "customer__email")
    list_filter = ("is_default", "city_province")
    list_select_related = ("customer",)
