from django.contrib import admin

from .models import PaymentEvent


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ("id", "provider_code", "event_id", "event_type", "processing_status", "outcome", "order", "created_at")
    search_fields = ("event_id", "intent_reference")
    list_filter = ("provider_code", "processing_status", "event_type")
    readonly_fields = ("payload_json", "created_at", "processed_at")
