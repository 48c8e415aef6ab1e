from django.urls import path

from .views import CartAPI, CartItemDetailAPI, CartItemsAPI, CartStockAPI

urlpatterns = [
    path("cart/", CartAPI.as_view(), name="api_cart"),
    path("cart/stock/", CartStockAPI.as_view(), name="api_cart_stock"),
    path("cart/items/", CartItemsAPI.as_view(), name="api_cart_items"),
    path("cart/items/<int:cart_item_id>/", CartItemDetailAPI.as_view(), name="api_cart_item_detail"),
]
