from django.contrib import admin

from .models import Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "merchant", "price_per_night", "currency", "max_guests", "status")
    list_filter = ("status", "currency")
    search_fields = ("name", "location", "merchant__email")
    raw_id_fields = ("merchant",)
