from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from core import errors
from core.dates import count_nights, parse_date
from core.records import PropertyRecord
from core.store import BookingStore, get_store


@dataclass
class AvailabilityQuote:
    available: bool
    nights: int
    total_price: Decimal
    property: PropertyRecord


class AvailabilityChecker:
    """Decides whether a property is free for ``[check_in, check_out)`` and prices the stay."""

    def __init__(self, store: BookingStore | None = None):
        self.store = store or get_store()

    def check(self, property_id, check_in, check_out, exclude_booking_id=None) -> AvailabilityQuote:
        check_in = parse_date(check_in, "check_in")
        check_out = parse_date(check_out, "check_out")
        if check_out <= check_in:
            raise errors.ValidationError("Check-out must be after check-in.")

        prop = self.store.get_property(property_id)
        if prop is None:
            raise errors.NotFound("Property not found.")

        nights = count_nights(check_in, check_out)
        overlapping = self.store.has_overlap(
            prop.id,
            check_in,
            check_out,
            exclude_booking_id=exclude_booking_id,
        )
        return AvailabilityQuote(
            available=not overlapping,
            nights=nights,
            total_price=(Decimal(nights) * Decimal(prop.price_per_night)).quantize(Decimal("0.01")),
            property=prop,
        )
