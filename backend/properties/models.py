from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


def default_currency() -> str:
    return getattr(settings, "DEFAULT_CURRENCY", "USD")


class Property(models.Model):
    """A rentable listing owned by a merchant."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending review"
        ACTIVE = "active", "Active"
        REJECTED = "rejected", "Rejected"

    merchant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=200)
    address = models.CharField(max_length=255, blank=True)
    bedrooms = models.PositiveIntegerField(default=1)
    bathrooms = models.PositiveIntegerField(default=1)
    max_guests = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default=default_currency)
    amenities = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Fields that stay editable after the first booking references the property.
    EDITABLE_WHEN_BOOKED = {"status", "price_per_night"}

    class Meta:
        ordering = ["-created_at", "id"]
        verbose_name_plural = "properties"

    def __str__(self):
        return f"{self.name} @ {self.location}"

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.ACTIVE
