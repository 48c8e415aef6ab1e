from django.urls import path

from .views import ApplyPromoCodeAPI

urlpatterns = [
    path("coupons/apply/", ApplyPromoCodeAPI.as_view(), name="api_coupon_apply"),
]
