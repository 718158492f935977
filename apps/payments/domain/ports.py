from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class PaymentAuthorization:
    handle_id: str
    client_secret: str | None
    status: str = ""


@dataclass(frozen=True)
class VerifiedEvent:
    event_id: str
    event_type: str
    intent_reference: str
    status: str
    metadata: dict = field(default_factory=dict)


class PaymentGatewayPort(Protocol):
    code: str
    name: str

    def create_authorization(
        self,
        *,
        amount_minor: int,
        currency: str,
        metadata: dict,
        description: str = "",
    ) -> PaymentAuthorization:
        ...

    def retrieve_status(self, *, handle_id: str) -> str:
        ...

    def verify_event(self, *, payload: bytes, signature: str) -> VerifiedEvent:
        ...

    def public_config(self) -> dict:
        ...
