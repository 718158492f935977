from __future__ import annotations


class PaymentDomainError(ValueError):
    code = "payment_error"


class PaymentBridgeError(PaymentDomainError):
    code = "payment_bridge_error"


class PaymentIntentFailedError(PaymentBridgeError):
    code = "payment_intent_failed"


class PaymentNotSuccessfulError(PaymentDomainError):
    code = "payment_not_successful"

    def __init__(self, message: str = "Payment not successful.", *, status: str = ""):
        super().__init__(message)
        self.status = status


class PaymentHandleMismatchError(PaymentDomainError):
    code = "payment_handle_mismatch"


class SignatureInvalidError(PaymentDomainError):
    code = "signature_invalid"


class UnknownPaymentProviderError(PaymentDomainError):
    code = "unknown_payment_provider"
