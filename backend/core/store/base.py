"""
Storage contract for the booking workflow.

The availability checker, booking lifecycle and payment processor only talk to a
``BookingStore``. Two implementations ship with the project:

- ``core.store.relational.RelationalBookingStore``: Django ORM, transactional.
- ``core.store.memory.InMemoryBookingStore``: process-local dictionaries.

Both must honour the serialization boundaries exposed by ``property_lock`` and
``booking_lock``: everything executed inside ``property_lock(pk)`` is isolated
from any other ``property_lock(pk)`` holder, which is what keeps the
availability check and the booking insert atomic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from core.records import BookingRecord, PaymentRecord, PropertyRecord


class BookingStore(ABC):
    # Properties

    @abstractmethod
    def get_property(self, property_id) -> Optional[PropertyRecord]:
        """Return the property or ``None``."""

    # Bookings

    @abstractmethod
    def get_booking(self, booking_id) -> Optional[BookingRecord]:
        """Return the booking or ``None``."""

    @abstractmethod
    def list_bookings(
        self,
        *,
        customer_id=None,
        property_id=None,
        merchant_id=None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[BookingRecord]:
        """Newest-created first; soonest check-in first when scoped to a property."""

    @abstractmethod
    def has_overlap(
        self,
        property_id,
        check_in: date,
        check_out: date,
        *,
        exclude_booking_id=None,
    ) -> bool:
        """True when a non-cancelled, non-rejected booking intersects [check_in, check_out)."""

    @abstractmethod
    def add_booking(self, booking: BookingRecord) -> BookingRecord:
        """Persist a new booking and return it with its id and timestamps."""

    @abstractmethod
    def update_booking(self, booking_id, **changes) -> BookingRecord:
        """Apply field changes to a booking and return the updated record."""

    @abstractmethod
    def booking_stats(
        self,
        *,
        merchant_id=None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Dict[str, Any]:
        """Counts and revenue for bookings created within the optional window."""

    # Payments

    @abstractmethod
    def get_payment(self, payment_id) -> Optional[PaymentRecord]:
        """Return the payment or ``None``."""

    @abstractmethod
    def list_payments(
        self,
        *,
        booking_id=None,
        payer_id=None,
        status: str | None = None,
        method: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[PaymentRecord]:
        """Newest-created first."""

    @abstractmethod
    def add_payment(self, payment: PaymentRecord) -> PaymentRecord:
        """Persist a payment attempt."""

    @abstractmethod
    def update_payment(self, payment_id, **changes) -> PaymentRecord:
        """Apply field changes to a payment and return the updated record."""

    @abstractmethod
    def payment_stats(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Dict[str, Any]:
        """Counts and sums by payment status."""

    # Serialization boundaries

    @abstractmethod
    def property_lock(self, property_id) -> AbstractContextManager:
        """Serialize work on one property (availability check + booking insert)."""

    @abstractmethod
    def booking_lock(self, booking_id) -> AbstractContextManager:
        """Serialize work on one booking (payment and refund state changes)."""
