from django.urls import path

from .views import CreatePaymentIntentAPI

urlpatterns = [
    path("payments/create-payment-intent/", CreatePaymentIntentAPI.as_view(), name="api_payments_create_intent"),
]
