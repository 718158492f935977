from __future__ import annotations

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.orders.domain.errors import OrderDomainError
from apps.orders.interfaces.api.serializers import OrderSummarySerializer
from apps.orders.interfaces.api.views import order_error
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.application.use_cases.confirm_payment import ConfirmPaymentCommand, ConfirmPaymentUseCase
from apps.payments.application.use_cases.handle_webhook_event import (
    HandleWebhookEventCommand,
    HandleWebhookEventUseCase,
)
from apps.payments.domain.errors import (
    PaymentBridgeError,
    PaymentDomainError,
    PaymentNotSuccessfulError,
)
from apps.payments.interfaces.api.serializers import ConfirmPaymentInputSerializer, PaymentEventSerializer
from storefront.api_responses import error, invalid, success


def payment_error(exc: PaymentDomainError):
    details = None
    http_status = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, PaymentNotSuccessfulError):
        details = {"status": exc.status}
    elif isinstance(exc, PaymentBridgeError):
        http_status = status.HTTP_502_BAD_GATEWAY
    return error(message=str(exc), code=exc.code, details=details, http_status=http_status)


class ConfirmPaymentAPI(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ConfirmPaymentInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid(serializer)
        data = serializer.validated_data
        try:
            result = ConfirmPaymentUseCase.execute(
                ConfirmPaymentCommand(
                    order_id=data["order_id"],
                    handle_id=data["payment_intent_id"],
                    actor=request.user,
                )
            )
        except OrderDomainError as exc:
            return order_error(exc)
        except PaymentDomainError as exc:
            return payment_error(exc)
        return success(
            data={
                "message": "Payment confirmed successfully.",
                "outcome": result.application.value,
                "order": OrderSummarySerializer(result.order).data,
            }
        )


class WebhookAPI(APIView):
    """Signed notifications pushed by the configured payment bridge. The raw body is what gets verified."""

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "webhooks"

    def post(self, request):
        signature = request.META.get("HTTP_STRIPE_SIGNATURE") or request.META.get("HTTP_X_SIGNATURE") or ""
        try:
            event = HandleWebhookEventUseCase.execute(
                HandleWebhookEventCommand(payload=request.body, signature=signature)
            )
        except PaymentDomainError as exc:
            return error(message=str(exc), code=exc.code)
        return success(data={"received": True, "event": PaymentEventSerializer(event).data})


class PaymentConfigAPI(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        gateway = PaymentGatewayFacade.default()
        data = gateway.public_config()
        data["currency"] = getattr(settings, "STOREFRONT_CURRENCY", "usd")
        data["providers"] = PaymentGatewayFacade.available_providers()
        return success(data=data)
