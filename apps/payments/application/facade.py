from __future__ import annotations

from django.conf import settings

from apps.payments.domain.errors import UnknownPaymentProviderError
from apps.payments.domain.ports import PaymentGatewayPort
from apps.payments.infrastructure.gateways.dummy_gateway import DummyGateway
from apps.payments.infrastructure.gateways.stripe_gateway import StripeGateway


class PaymentGatewayFacade:
    _registry: dict[str, PaymentGatewayPort] = {
        DummyGateway.code: DummyGateway(),
        StripeGateway.code: StripeGateway(),
    }

    @classmethod
    def get(cls, provider_code: str) -> PaymentGatewayPort:
        key = (provider_code or "").strip().lower()
        if key not in cls._registry:
            raise UnknownPaymentProviderError(f"Unknown payment provider: {provider_code}")
        return cls._registry[key]

    @classmethod
    def default_code(cls) -> str:
        return (getattr(settings, "PAYMENTS_PROVIDER", "") or DummyGateway.code).strip().lower()

    @classmethod
    def default(cls) -> PaymentGatewayPort:
        return cls.get(cls.default_code())

    @classmethod
    def available_providers(cls) -> list[dict]:
        return [{"code": adapter.code, "name": adapter.name} for adapter in cls._registry.values()]
