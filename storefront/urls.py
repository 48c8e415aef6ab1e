"""
URL configuration for the storefront project.

JSON API lives under `/api/`; the Django admin doubles as the back-office.
"""

from django.contrib import admin
from django.urls import include, path

handler404 = "storefront.error_views.handle_404"
handler500 = "storefront.error_views.handle_500"

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("storefront.api_urls")),
]
