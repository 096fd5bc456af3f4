from __future__ import annotations

import copy
import itertools
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal

from django.utils import timezone

from bookings.models import Booking
from bookings.states import RELEASED_STATUSES
from core.records import PropertyRecord
from payments.models import Payment

from .base import BookingStore


class InMemoryBookingStore(BookingStore):
    """
    Process-local backend used by unit tests and scripts.

    Records are copied on the way in and out, so callers never mutate stored
    state by accident. Each property and booking gets its own re-entrant lock.
    """

    def __init__(self):
        self._properties: dict[int, PropertyRecord] = {}
        self._bookings = {}
        self._payments = {}
        self._booking_ids = itertools.count(1)
        self._payment_ids = itertools.count(1)
        self._data_lock = threading.RLock()
        self._registry_lock = threading.Lock()
        self._property_locks = defaultdict(threading.RLock)
        self._booking_locks = defaultdict(threading.RLock)

    def add_property(self, prop: PropertyRecord) -> PropertyRecord:
        with self._data_lock:
            self._properties[prop.id] = replace(prop)
        return replace(prop)

    def get_property(self, property_id):
        with self._data_lock:
            prop = self._properties.get(property_id)
            return replace(prop) if prop else None

    def _hydrate(self, booking):
        prop = self._properties.get(booking.property_id)
        if prop is not None:
            booking.merchant_id = prop.merchant_id
            booking.property_name = prop.name
        return booking

    def get_booking(self, booking_id):
        with self._data_lock:
            booking = self._bookings.get(booking_id)
            return self._hydrate(replace(booking)) if booking else None

    def list_bookings(
        self,
        *,
        customer_id=None,
        property_id=None,
        merchant_id=None,
        status=None,
        limit=50,
        offset=0,
    ):
        with self._data_lock:
            bookings = [self._hydrate(replace(b)) for b in self._bookings.values()]
        if customer_id is not None:
            bookings = [b for b in bookings if b.customer_id == customer_id]
        if merchant_id is not None:
            bookings = [b for b in bookings if b.merchant_id == merchant_id]
        if status:
            bookings = [b for b in bookings if b.status == status]
        if property_id is not None:
            bookings = [b for b in bookings if b.property_id == property_id]
            bookings.sort(key=lambda b: (b.check_in, b.id))
        else:
            bookings.sort(key=lambda b: (b.created_at, b.id), reverse=True)
        return bookings[offset:offset + limit]

    def has_overlap(self, property_id, check_in, check_out, *, exclude_booking_id=None):
        with self._data_lock:
            for booking in self._bookings.values():
                if booking.property_id != property_id or booking.id == exclude_booking_id:
                    continue
                if booking.status in RELEASED_STATUSES:
                    continue
                if booking.check_in < check_out and check_in < booking.check_out:
                    return True
        return False

    def add_booking(self, booking):
        now = timezone.now()
        with self._data_lock:
            stored = replace(booking, id=next(self._booking_ids), created_at=now, updated_at=now)
            self._bookings[stored.id] = stored
            return self._hydrate(replace(stored))

    def update_booking(self, booking_id, **changes):
        with self._data_lock:
            stored = replace(self._bookings[booking_id], **changes, updated_at=timezone.now())
            self._bookings[booking_id] = stored
            return self._hydrate(replace(stored))

    def booking_stats(self, *, merchant_id=None, start=None, end=None):
        with self._data_lock:
            bookings = [self._hydrate(replace(b)) for b in self._bookings.values()]
        if merchant_id is not None:
            bookings = [b for b in bookings if b.merchant_id == merchant_id]
        if start is not None:
            bookings = [b for b in bookings if b.created_at >= start]
        if end is not None:
            bookings = [b for b in bookings if b.created_at <= end]
        return {
            "total": len(bookings),
            "revenue": sum(
                (b.total_price for b in bookings if b.payment_status == Booking.PaymentStatus.PAID),
                Decimal("0.00"),
            ),
            "pending": sum(1 for b in bookings if b.status == Booking.Status.PENDING),
            "confirmed": sum(1 for b in bookings if b.status == Booking.Status.CONFIRMED),
        }

    def get_payment(self, payment_id):
        with self._data_lock:
            payment = self._payments.get(payment_id)
            return copy.deepcopy(payment) if payment else None

    def list_payments(
        self,
        *,
        booking_id=None,
        payer_id=None,
        status=None,
        method=None,
        limit=50,
        offset=0,
    ):
        with self._data_lock:
            payments = [copy.deepcopy(p) for p in self._payments.values()]
        if booking_id is not None:
            payments = [p for p in payments if p.booking_id == booking_id]
        if payer_id is not None:
            payments = [p for p in payments if p.payer_id == payer_id]
        if status:
            payments = [p for p in payments if p.status == status]
        if method:
            payments = [p for p in payments if p.method == method]
        payments.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return payments[offset:offset + limit]

    def add_payment(self, payment):
        now = timezone.now()
        with self._data_lock:
            stored = copy.deepcopy(replace(payment, id=next(self._payment_ids), created_at=now, updated_at=now))
            self._payments[stored.id] = stored
            return copy.deepcopy(stored)

    def update_payment(self, payment_id, **changes):
        with self._data_lock:
            stored = copy.deepcopy(replace(self._payments[payment_id], **changes, updated_at=timezone.now()))
            self._payments[payment_id] = stored
            return copy.deepcopy(stored)

    def payment_stats(self, *, start=None, end=None):
        with self._data_lock:
            payments = list(self._payments.values())
        if start is not None:
            payments = [p for p in payments if p.created_at >= start]
        if end is not None:
            payments = [p for p in payments if p.created_at <= end]

        def _with_status(status):
            return [p for p in payments if p.status == status]

        completed = _with_status(Payment.Status.COMPLETED)
        pending = _with_status(Payment.Status.PENDING)
        return {
            "total": len(payments),
            "completed": len(completed),
            "completed_amount": sum((p.amount for p in completed), Decimal("0.00")),
            "pending": len(pending),
            "pending_amount": sum((p.amount for p in pending), Decimal("0.00")),
            "failed": len(_with_status(Payment.Status.FAILED)),
            "refund_pending": len(_with_status(Payment.Status.REFUND_PENDING)),
            "refunded": len(_with_status(Payment.Status.REFUNDED)),
        }

    @contextmanager
    def property_lock(self, property_id):
        with self._registry_lock:
            lock = self._property_locks[property_id]
        with lock:
            yield

    @contextmanager
    def booking_lock(self, booking_id):
        with self._registry_lock:
            lock = self._booking_locks[booking_id]
        with lock:
            yield
