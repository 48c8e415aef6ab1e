from django.contrib import admin

from .models import AccountProfile


@admin.register(AccountProfile)
class AccountProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "first_name", "last_name", "phone", "role", "created_at")
    search_fields = ("phone", "first_name", "last_name", "user__username", "user__email")
    list_filter = ("role",)
    list_select_related = ("user",)
