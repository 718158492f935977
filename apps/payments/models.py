"""
Payments models.

Every signed notification received from the payment bridge is recorded once,
keyed by provider and event id, so redeliveries are recognised.
"""

from django.db import models


class PaymentEvent(models.Model):
    """A verified webhook event and what the workflow did with it."""

    STATUS_PENDING = "pending"
    STATUS_PROCESSED = "processed"
    STATUS_IGNORED = "ignored"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSED, "Processed"),
        (STATUS_IGNORED, "Ignored"),
        (STATUS_FAILED, "Failed"),
    ]

    provider_code = models.CharField(max_length=30)
    event_id = models.CharField(max_length=255)
    event_type = models.CharField(max_length=100, blank=True, default="")
    intent_reference = models.CharField(max_length=255, blank=True, default="", db_index=True)
    order = models.ForeignKey(
        "orders.Order", on_delete=models.SET_NULL, null=True, blank=True, related_name="payment_events"
    )
    processing_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    outcome = models.CharField(max_length=30, blank=True, default="")
    payload_json = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["provider_code", "event_id"], name="uq_payment_event_provider_event"),
        ]

    def __str__(self) -> str:
        return f"{self.provider_code}:{self.event_id} ({self.processing_status})"
