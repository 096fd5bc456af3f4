from django.contrib import admin

from payments.models import Payment

from .models import Booking


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("method", "amount", "currency", "status", "transaction_id", "created_at")
    readonly_fields = fields


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "customer", "check_in", "check_out", "guests", "total_price", "status", "payment_status")
    list_filter = ("status", "payment_status")
    search_fields = ("property__name", "customer__email")
    date_hierarchy = "check_in"
    raw_id_fields = ("property", "customer", "payment")
    inlines = [PaymentInline]
