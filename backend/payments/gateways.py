"""
Payment gateway simulators.

Each gateway exposes ``async charge(fields, amount, currency)`` and always
returns a ``GatewayResult``; declines are data, never exceptions. The registry
is built from ``settings.PAYMENT_GATEWAYS`` (method name -> dotted class path).
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


@dataclass
class GatewayResult:
    success: bool
    transaction_id: str = ""
    timestamp: str = field(default_factory=lambda: timezone.now().isoformat())
    error: Optional[str] = None
    code: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        extra = payload.pop("extra")
        payload.update(extra)
        return {key: value for key, value in payload.items() if value is not None}


def _short_id() -> str:
    return uuid.uuid4().hex[:8].upper()


class GatewaySimulator(ABC):
    method = ""
    name = ""
    description = ""
    icon = ""

    def __init__(self, delay: float | None = None):
        if delay is None:
            delay = getattr(settings, "PAYMENT_GATEWAY_DELAY", 0.5)
        self.delay = delay

    async def simulate_latency(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)

    @abstractmethod
    async def charge(self, fields: Dict[str, Any], amount: Decimal, currency: str) -> GatewayResult:
        """Charge ``amount``; declines come back as an unsuccessful result."""


class CreditCardGateway(GatewaySimulator):
    method = "credit_card"
    name = "Credit Card"
    description = "Pay with Visa, MasterCard, or American Express"
    icon = "credit-card"

    async def charge(self, fields, amount, currency):
        await self.simulate_latency()
        card_number = str(fields.get("card_number") or "").replace(" ", "")
        if card_number.endswith("0000"):
            return GatewayResult(success=False, error="Card declined", code="CARD_DECLINED")
        return GatewayResult(success=True, transaction_id=f"TXN_{_short_id()}")


class PayPalGateway(GatewaySimulator):
    method = "paypal"
    name = "PayPal"
    description = "Pay securely with your PayPal account"
    icon = "paypal"

    async def charge(self, fields, amount, currency):
        await self.simulate_latency()
        return GatewayResult(success=True, transaction_id=f"PP_{_short_id()}")


class BankTransferGateway(GatewaySimulator):
    method = "bank_transfer"
    name = "Bank Transfer"
    description = "Direct bank transfer"
    icon = "bank"

    async def charge(self, fields, amount, currency):
        await self.simulate_latency()
        return GatewayResult(
            success=True,
            transaction_id=f"BT_{_short_id()}",
            extra={"reference": f"REF_{int(time.time() * 1000)}"},
        )


def _get_stripe_api_key() -> Optional[str]:
    key = getattr(settings, "STRIPE_SECRET_KEY", "")
    return key or None


def _should_use_stub() -> bool:
    if getattr(settings, "STRIPE_USE_STUB", False):
        return True
    return _get_stripe_api_key() is None


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1")))


class StripeGateway(GatewaySimulator):
    """Creates a real PaymentIntent when Stripe is configured, otherwise returns a ``pi_`` stub."""

    method = "stripe"
    name = "Stripe"
    description = "Pay with Stripe"
    icon = "stripe"

    async def charge(self, fields, amount, currency):
        if _should_use_stub():
            await self.simulate_latency()
            return GatewayResult(success=True, transaction_id=f"pi_{uuid.uuid4().hex[:24]}")
        return await sync_to_async(self._create_payment_intent, thread_sensitive=False)(fields, amount, currency)

    def _create_payment_intent(self, fields, amount, currency) -> GatewayResult:
        import stripe

        stripe.api_key = _get_stripe_api_key()
        params = {
            "amount": to_minor_units(amount),
            "currency": currency.lower(),
            "confirm": True,
            "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
        }
        if fields.get("payment_method_id"):
            params["payment_method"] = fields["payment_method_id"]
        if fields.get("idempotency_key"):
            params["idempotency_key"] = fields["idempotency_key"]
        try:
            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as exc:
            logger.warning("Stripe declined payment intent: %s", exc)
            return GatewayResult(
                success=False,
                error=getattr(exc, "user_message", None) or str(exc) or "Payment failed",
                code=getattr(exc, "code", None) or "STRIPE_ERROR",
            )
        succeeded = intent.status == "succeeded"
        return GatewayResult(
            success=succeeded,
            transaction_id=intent.id,
            error=None if succeeded else f"Payment intent {intent.status}",
            code=None if succeeded else "STRIPE_INCOMPLETE",
            extra={"stripe_status": intent.status},
        )


def load_gateways() -> Dict[str, GatewaySimulator]:
    registry = getattr(settings, "PAYMENT_GATEWAYS", {})
    return {method: import_string(path)() for method, path in registry.items()}
