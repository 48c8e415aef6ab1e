from django.urls import path

from .views import ConfirmPaymentAPI, PaymentConfirmationAPI

urlpatterns = [
    path("payments/<uuid:transaction_id>/", PaymentConfirmationAPI.as_view(), name="api_payment_confirmation"),
    path("payments/<uuid:transaction_id>/confirm/", ConfirmPaymentAPI.as_view(), name="api_payment_confirm"),
]
