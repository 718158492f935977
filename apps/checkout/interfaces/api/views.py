from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.checkout.application.use_cases.start_checkout import StartCheckoutCommand, StartCheckoutUseCase
from apps.orders.domain.errors import OrderDomainError
from apps.orders.interfaces.api.serializers import OrderCreateInputSerializer
from apps.orders.interfaces.api.views import order_error
from apps.payments.domain.errors import PaymentDomainError
from apps.payments.interfaces.api.views import payment_error
from storefront.api_responses import invalid, success


class CreatePaymentIntentAPI(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "checkout"

    def post(self, request):
        serializer = OrderCreateInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid(serializer)
        data = serializer.validated_data
        try:
            result = StartCheckoutUseCase.execute(
                StartCheckoutCommand(
                    user=request.user,
                    items=[dict(item) for item in data["items"]],
                    shipping_address=dict(data["shipping_address"]),
                    payment_method=data["payment_method"],
                    notes=data["notes"],
                )
            )
        except OrderDomainError as exc:
            return order_error(exc)
        except PaymentDomainError as exc:
            return payment_error(exc)
        return success(data=result.as_dict(), http_status=status.HTTP_201_CREATED)
