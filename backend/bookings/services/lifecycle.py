from __future__ import annotations

import logging

from availability.services.checker import AvailabilityChecker
from bookings.models import Booking
from bookings.states import can_transition, is_valid_status
from core import errors
from core.dates import day_window, parse_date
from core.records import Actor, BookingRecord
from core.store import BookingStore, get_store

logger = logging.getLogger(__name__)

CUSTOMER_LIST_LIMIT = 20
DEFAULT_LIST_LIMIT = 50


class BookingService:
    """Create, read, transition and cancel bookings."""

    def __init__(self, store: BookingStore | None = None, checker: AvailabilityChecker | None = None):
        self.store = store or get_store()
        self.checker = checker or AvailabilityChecker(self.store)

    def create(
        self,
        property_id,
        check_in,
        check_out,
        guests: int,
        requester: Actor,
        special_requests: str = "",
    ) -> BookingRecord:
        check_in = parse_date(check_in, "check_in")
        check_out = parse_date(check_out, "check_out")

        prop = self.store.get_property(property_id)
        if prop is None or prop.status != "active":
            raise errors.NotFound("Property unavailable.")
        if guests < 1:
            raise errors.ValidationError("At least one guest is required.")
        if guests > prop.max_guests:
            raise errors.ValidationError("Guest count exceeds property limit.")

        with self.store.property_lock(prop.id):
            quote = self.checker.check(prop.id, check_in, check_out)
            if not quote.available:
                raise errors.Conflict("Dates already reserved.")
            booking = self.store.add_booking(
                BookingRecord(
                    property_id=prop.id,
                    customer_id=requester.id,
                    check_in=check_in,
                    check_out=check_out,
                    guests=guests,
                    total_price=quote.total_price,
                    currency=prop.currency,
                    status=Booking.Status.PENDING.value,
                    payment_status=Booking.PaymentStatus.UNPAID.value,
                    special_requests=special_requests or "",
                )
            )

        logger.info(
            "Booking %s created on property %s for user %s (%s nights, %s %s)",
            booking.id,
            prop.id,
            requester.id,
            quote.nights,
            booking.total_price,
            booking.currency,
        )
        return booking

    def get(self, booking_id) -> BookingRecord:
        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise errors.NotFound("Booking not found.")
        return booking

    def list(
        self,
        *,
        customer_id=None,
        property_id=None,
        merchant_id=None,
        status: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ):
        if limit is None:
            limit = CUSTOMER_LIST_LIMIT if customer_id is not None else DEFAULT_LIST_LIMIT
        return self.store.list_bookings(
            customer_id=customer_id,
            property_id=property_id,
            merchant_id=merchant_id,
            status=status,
            limit=limit,
            offset=offset,
        )

    def ensure_can_manage(self, booking: BookingRecord, actor: Actor) -> None:
        """Admins manage every booking; merchants only those on their own properties."""
        if actor.is_admin:
            return
        if actor.is_merchant and booking.merchant_id == actor.id:
            return
        raise errors.Forbidden("Not authorized to manage this booking.")

    def update_status(self, booking_id, new_status: str, actor: Actor) -> BookingRecord:
        if not is_valid_status(new_status):
            raise errors.ValidationError("Invalid status.")

        with self.store.booking_lock(booking_id):
            booking = self.get(booking_id)
            self.ensure_can_manage(booking, actor)
            if not can_transition(booking.status, new_status):
                raise errors.ValidationError(
                    f"Cannot change booking status from {booking.status} to {new_status}."
                )
            updated = self.store.update_booking(booking_id, status=str(new_status))

        logger.info(
            "Booking %s moved from %s to %s by user %s",
            booking_id,
            booking.status,
            updated.status,
            actor.id,
        )
        return updated

    def cancel(self, booking_id, actor: Actor) -> BookingRecord:
        with self.store.booking_lock(booking_id):
            booking = self.get(booking_id)
            if booking.customer_id != actor.id and not actor.is_admin:
                raise errors.Forbidden("Not authorized to cancel this booking.")
            if booking.status == Booking.Status.COMPLETED:
                raise errors.ValidationError("Cannot cancel completed booking.")
            if not can_transition(booking.status, Booking.Status.CANCELLED.value):
                raise errors.ValidationError(f"Cannot cancel {booking.status} booking.")
            # payment_status is left as-is; refunds go through the payment workflow.
            updated = self.store.update_booking(booking_id, status=Booking.Status.CANCELLED.value)

        logger.info("Booking %s cancelled by user %s", booking_id, actor.id)
        return updated

    def stats(self, merchant_id=None, start_date=None, end_date=None) -> dict:
        start, end = day_window(start_date, end_date)
        return self.store.booking_stats(merchant_id=merchant_id, start=start, end=end)
