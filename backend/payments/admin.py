from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "payer", "method", "amount", "currency", "status", "created_at")
    list_filter = ("status", "method")
    search_fields = ("transaction_id", "payer__email")
    raw_id_fields = ("booking", "payer")
    readonly_fields = ("created_at", "updated_at")
