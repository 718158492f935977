from django.urls import path

from .views import ConfirmPaymentAPI, PaymentConfigAPI, WebhookAPI

urlpatterns = [
    path("payments/confirm-payment/", ConfirmPaymentAPI.as_view(), name="api_payments_confirm"),
    path("payments/webhook/", WebhookAPI.as_view(), name="api_payments_webhook"),
    path("payments/config/", PaymentConfigAPI.as_view(), name="api_payments_config"),
]
