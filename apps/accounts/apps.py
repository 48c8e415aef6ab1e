from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.accounts"
    verbose_name = "Accounts"

    def ready(self) -> None:
        from storefront.settings import DEV_SECRET_KEY

        env = (getattr(settings, "ENVIRONMENT", "") or "").strip().lower()
        if env in {"prod", "production"}:
            if getattr(settings, "DEBUG", False):
                raise ImproperlyConfigured("DEBUG must be False in production.")
            if getattr(settings, "SECRET_KEY", "") == DEV_SECRET_KEY:
                raise ImproperlyConfigured("DJANGO_SECRET_KEY must be set in production.")
