from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal

from django.db import OperationalError, transaction
from django.db.models import Count, Q, Sum

from bookings.models import Booking
from bookings.states import RELEASED_STATUSES
from core import errors
from core.records import BookingRecord, PaymentRecord, PropertyRecord
from payments.models import Payment
from properties.models import Property

from .base import BookingStore

logger = logging.getLogger(__name__)


def _property_record(prop: Property) -> PropertyRecord:
    return PropertyRecord(
        id=prop.id,
        name=prop.name,
        location=prop.location,
        price_per_night=prop.price_per_night,
        currency=prop.currency,
        max_guests=prop.max_guests,
        status=prop.status,
        merchant_id=prop.merchant_id,
    )


def _booking_record(booking: Booking) -> BookingRecord:
    return BookingRecord(
        id=booking.id,
        property_id=booking.property_id,
        customer_id=booking.customer_id,
        check_in=booking.check_in,
        check_out=booking.check_out,
        guests=booking.guests,
        total_price=booking.total_price,
        currency=booking.currency,
        status=booking.status,
        payment_status=booking.payment_status,
        special_requests=booking.special_requests,
        payment_id=booking.payment_id,
        payment_method=booking.payment_method,
        merchant_id=booking.property.merchant_id,
        property_name=booking.property.name,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )


def _payment_record(payment: Payment) -> PaymentRecord:
    return PaymentRecord(
        id=payment.id,
        booking_id=payment.booking_id,
        payer_id=payment.payer_id,
        amount=payment.amount,
        currency=payment.currency,
        method=payment.method,
        status=payment.status,
        transaction_id=payment.transaction_id,
        gateway_response=dict(payment.gateway_response or {}),
        created_at=payment.created_at,
        updated_at=payment.updated_at,
    )


class RelationalBookingStore(BookingStore):
    """Django ORM backend; locks map to ``SELECT ... FOR UPDATE`` inside ``transaction.atomic()``."""

    def get_property(self, property_id):
        prop = Property.objects.filter(pk=property_id).first()
        return _property_record(prop) if prop else None

    def get_booking(self, booking_id):
        booking = Booking.objects.select_related("property").filter(pk=booking_id).first()
        return _booking_record(booking) if booking else None

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
        queryset = Booking.objects.select_related("property")
        if customer_id is not None:
            queryset = queryset.filter(customer_id=customer_id)
        if merchant_id is not None:
            queryset = queryset.filter(property__merchant_id=merchant_id)
        if status:
            queryset = queryset.filter(status=status)
        if property_id is not None:
            queryset = queryset.filter(property_id=property_id).order_by("check_in", "id")
        else:
            queryset = queryset.order_by("-created_at", "-id")
        return [_booking_record(booking) for booking in queryset[offset:offset + limit]]

    def has_overlap(self, property_id, check_in, check_out, *, exclude_booking_id=None):
        queryset = Booking.objects.filter(
            property_id=property_id,
            check_in__lt=check_out,
            check_out__gt=check_in,
        ).exclude(status__in=RELEASED_STATUSES)
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        return queryset.exists()

    def add_booking(self, booking):
        created = Booking.objects.create(
            property_id=booking.property_id,
            customer_id=booking.customer_id,
            check_in=booking.check_in,
            check_out=booking.check_out,
            guests=booking.guests,
            total_price=booking.total_price,
            currency=booking.currency,
            status=booking.status,
            payment_status=booking.payment_status,
            special_requests=booking.special_requests or "",
        )
        return self.get_booking(created.pk)

    def update_booking(self, booking_id, **changes):
        booking = Booking.objects.get(pk=booking_id)
        for field, value in changes.items():
            setattr(booking, field, value)
        booking.save(update_fields=[*changes.keys(), "updated_at"])
        return self.get_booking(booking_id)

    def booking_stats(self, *, merchant_id=None, start=None, end=None):
        queryset = Booking.objects.all()
        if merchant_id is not None:
            queryset = queryset.filter(property__merchant_id=merchant_id)
        if start is not None:
            queryset = queryset.filter(created_at__gte=start)
        if end is not None:
            queryset = queryset.filter(created_at__lte=end)
        totals = queryset.aggregate(
            total=Count("id"),
            revenue=Sum("total_price", filter=Q(payment_status=Booking.PaymentStatus.PAID)),
            pending=Count("id", filter=Q(status=Booking.Status.PENDING)),
            confirmed=Count("id", filter=Q(status=Booking.Status.CONFIRMED)),
        )
        totals["revenue"] = totals["revenue"] or Decimal("0.00")
        return totals

    def get_payment(self, payment_id):
        payment = Payment.objects.filter(pk=payment_id).first()
        return _payment_record(payment) if payment else None

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
        queryset = Payment.objects.order_by("-created_at", "-id")
        if booking_id is not None:
            queryset = queryset.filter(booking_id=booking_id)
        if payer_id is not None:
            queryset = queryset.filter(payer_id=payer_id)
        if status:
            queryset = queryset.filter(status=status)
        if method:
            queryset = queryset.filter(method=method)
        return [_payment_record(payment) for payment in queryset[offset:offset + limit]]

    def add_payment(self, payment):
        created = Payment.objects.create(
            booking_id=payment.booking_id,
            payer_id=payment.payer_id,
            amount=payment.amount,
            currency=payment.currency,
            method=payment.method,
            status=payment.status,
            transaction_id=payment.transaction_id or "",
            gateway_response=payment.gateway_response or {},
        )
        return _payment_record(created)

    def update_payment(self, payment_id, **changes):
        payment = Payment.objects.get(pk=payment_id)
        for field, value in changes.items():
            setattr(payment, field, value)
        payment.save(update_fields=[*changes.keys(), "updated_at"])
        return _payment_record(payment)

    def payment_stats(self, *, start=None, end=None):
        queryset = Payment.objects.all()
        if start is not None:
            queryset = queryset.filter(created_at__gte=start)
        if end is not None:
            queryset = queryset.filter(created_at__lte=end)
        completed = Q(status=Payment.Status.COMPLETED)
        pending = Q(status=Payment.Status.PENDING)
        totals = queryset.aggregate(
            total=Count("id"),
            completed=Count("id", filter=completed),
            completed_amount=Sum("amount", filter=completed),
            pending=Count("id", filter=pending),
            pending_amount=Sum("amount", filter=pending),
            failed=Count("id", filter=Q(status=Payment.Status.FAILED)),
            refund_pending=Count("id", filter=Q(status=Payment.Status.REFUND_PENDING)),
            refunded=Count("id", filter=Q(status=Payment.Status.REFUNDED)),
        )
        totals["completed_amount"] = totals["completed_amount"] or Decimal("0.00")
        totals["pending_amount"] = totals["pending_amount"] or Decimal("0.00")
        return totals

    @contextmanager
    def property_lock(self, property_id):
        try:
            with transaction.atomic():
                list(Property.objects.select_for_update().filter(pk=property_id))
                yield
        except OperationalError as exc:
            # SQLite has no row locks; a writer that loses the database lock is another booking in flight.
            if transaction.get_connection().vendor != "sqlite" or "locked" not in str(exc):
                raise
            logger.warning("Booking on property %s lost the database lock: %s", property_id, exc)
            raise errors.Conflict("Property is being booked by another request.") from exc

    @contextmanager
    def booking_lock(self, booking_id):
        with transaction.atomic():
            list(Booking.objects.select_for_update().filter(pk=booking_id))
            yield
