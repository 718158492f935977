from __future__ import annotations

from rest_framework import serializers


class ConfirmPaymentInputSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=255)
    order_id = serializers.IntegerField(min_value=1)


class PaymentEventSerializer(serializers.Serializer):
    event_id = serializers.CharField()
    event_type = serializers.CharField()
    processing_status = serializers.CharField()
    outcome = serializers.CharField()
