from django.urls import path

from .views import OrderDetailAPI, OrderListAPI, OrderStatusAPI

urlpatterns = [
    path("orders/", OrderListAPI.as_view(), name="api_orders"),
    path("orders/<uuid:order_id>/status/", OrderStatusAPI.as_view(), name="api_order_status"),
    path("orders/<str:order_ref>/", OrderDetailAPI.as_view(), name="api_order_detail"),
]
