from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from asgiref.sync import async_to_sync
from django.conf import settings
from django.utils import timezone

from bookings.models import Booking
from bookings.states import PAYABLE_STATUSES
from core import errors
from core.dates import day_window
from core.records import PaymentRecord
from core.store import BookingStore, get_store
from payments.gateways import GatewayResult, GatewaySimulator, load_gateways
from payments.models import Payment

logger = logging.getLogger(__name__)

FREE_METHOD = Payment.Method.FREE.value

CATALOGUE_ORDER = ["credit_card", "paypal", "bank_transfer", "stripe"]


@dataclass
class PaymentResult:
    success: bool
    message: str
    payment: Optional[PaymentRecord]


class PaymentProcessor:
    """Charges bookings through the configured gateways and keeps booking payment state in sync."""

    def __init__(
        self,
        store: BookingStore | None = None,
        gateways: Dict[str, GatewaySimulator] | None = None,
        timeout: float | None = None,
    ):
        self.store = store or get_store()
        self.gateways = gateways if gateways is not None else load_gateways()
        if timeout is None:
            timeout = getattr(settings, "PAYMENT_GATEWAY_TIMEOUT", 10.0)
        self.timeout = timeout

    def process(self, booking_id, payer_id, payment_data: Dict[str, Any]) -> PaymentResult:
        payment_data = dict(payment_data or {})
        method = str(payment_data.pop("method", "") or "").strip().lower()

        with self.store.booking_lock(booking_id):
            booking = self.store.get_booking(booking_id)
            if booking is None:
                raise errors.NotFound("Booking not found.")
            if booking.customer_id != payer_id:
                raise errors.Forbidden("Not authorized to pay for this booking.")
            if booking.payment_status == Booking.PaymentStatus.PAID:
                raise errors.ValidationError("Booking already paid.")
            if booking.status not in PAYABLE_STATUSES:
                raise errors.ValidationError(f"Cannot pay for a {booking.status} booking.")

            if Decimal(booking.total_price) == 0:
                return self._confirm_free(booking, payer_id)

            if method == FREE_METHOD:
                raise errors.ValidationError("Free method not allowed for paid bookings.")
            gateway = self.gateways.get(method)
            if gateway is None:
                raise errors.ValidationError("Invalid payment method.")

            payment_data["idempotency_key"] = f"booking-{booking.id}-{uuid.uuid4().hex}"
            result = async_to_sync(self._charge)(gateway, payment_data, booking.total_price, booking.currency)
            payload = result.as_payload()
            payload["idempotency_key"] = payment_data["idempotency_key"]
            payload["processed_at"] = timezone.now().isoformat()
            payment = self.store.add_payment(
                PaymentRecord(
                    booking_id=booking.id,
                    payer_id=payer_id,
                    amount=booking.total_price,
                    currency=booking.currency,
                    method=method,
                    status=(Payment.Status.COMPLETED if result.success else Payment.Status.FAILED).value,
                    transaction_id=result.transaction_id or "",
                    gateway_response=payload,
                )
            )

            if not result.success:
                logger.warning(
                    "Payment %s for booking %s failed via %s: %s (%s)",
                    payment.id,
                    booking.id,
                    method,
                    result.error,
                    result.code,
                )
                return PaymentResult(success=False, message=result.error or "Payment failed", payment=payment)

            self._mark_paid(booking.id, payment)

        logger.info(
            "Payment %s completed for booking %s via %s (%s %s)",
            payment.id,
            booking.id,
            method,
            payment.amount,
            payment.currency,
        )
        return PaymentResult(success=True, message="Payment processed successfully", payment=payment)

    async def _charge(self, gateway: GatewaySimulator, fields, amount, currency) -> GatewayResult:
        # A timed-out charge may still settle upstream; the stored idempotency_key identifies it for reconciliation.
        try:
            return await asyncio.wait_for(gateway.charge(fields, amount, currency), timeout=self.timeout)
        except asyncio.TimeoutError:
            return GatewayResult(success=False, error="Payment gateway timed out", code="TIMEOUT")

    def _confirm_free(self, booking, payer_id) -> PaymentResult:
        payment = self.store.add_payment(
            PaymentRecord(
                booking_id=booking.id,
                payer_id=payer_id,
                amount=Decimal("0.00"),
                currency=booking.currency,
                method=FREE_METHOD,
                status=Payment.Status.COMPLETED.value,
                transaction_id=f"FREE-{uuid.uuid4().hex[:8].upper()}",
                gateway_response={
                    "success": True,
                    "type": "free_booking",
                    "processed_at": timezone.now().isoformat(),
                },
            )
        )
        self._mark_paid(booking.id, payment)
        logger.info("Free booking %s confirmed with payment %s", booking.id, payment.id)
        return PaymentResult(success=True, message="Free booking confirmed successfully!", payment=payment)

    def _mark_paid(self, booking_id, payment: PaymentRecord) -> None:
        self.store.update_booking(
            booking_id,
            payment_status=Booking.PaymentStatus.PAID.value,
            payment_id=payment.id,
            payment_method=payment.method,
            status=Booking.Status.CONFIRMED.value,
        )

    def get(self, payment_id) -> PaymentRecord:
        payment = self.store.get_payment(payment_id)
        if payment is None:
            raise errors.NotFound("Payment not found.")
        return payment

    def list(
        self,
        *,
        booking_id=None,
        payer_id=None,
        status: str | None = None,
        method: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ):
        return self.store.list_payments(
            booking_id=booking_id,
            payer_id=payer_id,
            status=status,
            method=method,
            limit=limit,
            offset=offset,
        )

    def request_refund(self, payment_id, requester_id, reason: str = "") -> PaymentRecord:
        payment = self.get(payment_id)
        with self.store.booking_lock(payment.booking_id):
            payment = self.get(payment_id)
            if payment.payer_id != requester_id:
                raise errors.Forbidden("Not authorized.")
            if payment.status != Payment.Status.COMPLETED:
                raise errors.ValidationError("Only completed payments can be refunded.")
            response = dict(payment.gateway_response)
            response.update(
                refund_reason=reason or "",
                refund_requested_at=timezone.now().isoformat(),
            )
            updated = self.store.update_payment(
                payment_id,
                status=Payment.Status.REFUND_PENDING.value,
                gateway_response=response,
            )
        logger.info("Refund requested for payment %s by user %s", payment_id, requester_id)
        return updated

    def process_refund(self, payment_id, approved: bool) -> PaymentRecord:
        payment = self.get(payment_id)
        with self.store.booking_lock(payment.booking_id):
            payment = self.get(payment_id)
            if payment.status != Payment.Status.REFUND_PENDING:
                raise errors.ValidationError("Payment has no pending refund request.")
            response = dict(payment.gateway_response)
            response.update(
                refund_processed_at=timezone.now().isoformat(),
                refund_approved=bool(approved),
            )
            new_status = Payment.Status.REFUNDED if approved else Payment.Status.COMPLETED
            updated = self.store.update_payment(
                payment_id,
                status=new_status.value,
                gateway_response=response,
            )
            if approved:
                # Completed stays are cancelled too.
                self.store.update_booking(
                    payment.booking_id,
                    payment_status=Booking.PaymentStatus.REFUNDED.value,
                    status=Booking.Status.CANCELLED.value,
                )
        logger.info("Refund for payment %s %s", payment_id, "approved" if approved else "declined")
        return updated

    def stats(self, start_date=None, end_date=None) -> dict:
        start, end = day_window(start_date, end_date)
        return self.store.payment_stats(start=start, end=end)

    def methods(self):
        enabled = set(self.gateways)
        catalogue = []
        for method in CATALOGUE_ORDER + sorted(enabled - set(CATALOGUE_ORDER)):
            gateway = self.gateways.get(method)
            if gateway is None:
                continue
            catalogue.append(
                {
                    "id": method,
                    "name": gateway.name or method.replace("_", " ").title(),
                    "description": gateway.description,
                    "icon": gateway.icon or method,
                    "enabled": True,
                }
            )
        return catalogue
