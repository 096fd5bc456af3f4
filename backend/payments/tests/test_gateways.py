from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe
from asgiref.sync import async_to_sync

from payments.gateways import (
    BankTransferGateway,
    CreditCardGateway,
    GatewaySimulator,
    PayPalGateway,
    StripeGateway,
    load_gateways,
    to_minor_units,
)


def charge(gateway, fields=None, amount="120.00", currency="USD"):
    return async_to_sync(gateway.charge)(fields or {}, Decimal(amount), currency)


def test_registry_follows_settings(settings):
    settings.PAYMENT_GATEWAYS = {"paypal": "payments.gateways.PayPalGateway"}

    gateways = load_gateways()

    assert list(gateways) == ["paypal"]
    assert isinstance(gateways["paypal"], PayPalGateway)


def test_gateway_must_implement_charge():
    class Incomplete(GatewaySimulator):
        method = "cheque"

    with pytest.raises(TypeError):
        Incomplete(delay=0)


def test_gateway_delay_defaults_to_setting(settings):
    settings.PAYMENT_GATEWAY_DELAY = 0.25

    assert CreditCardGateway().delay == 0.25
    assert CreditCardGateway(delay=0).delay == 0


@pytest.mark.parametrize("card_number", ["4111111111111111", "4242 4242 4242 4242", ""])
def test_card_gateway_approves(card_number):
    result = charge(CreditCardGateway(delay=0), {"card_number": card_number})

    assert result.success is True
    assert result.transaction_id.startswith("TXN_")
    assert len(result.transaction_id) == len("TXN_") + 8


@pytest.mark.parametrize("card_number", ["4111111111110000", "4111 1111 1111 0000"])
def test_card_gateway_declines_zero_suffix(card_number):
    result = charge(CreditCardGateway(delay=0), {"card_number": card_number})

    assert result.success is False
    assert result.error == "Card declined"
    assert result.code == "CARD_DECLINED"
    assert result.transaction_id == ""


def test_bank_transfer_reference_lands_in_payload():
    result = charge(BankTransferGateway(delay=0))

    payload = result.as_payload()
    assert payload["transaction_id"].startswith("BT_")
    assert payload["reference"].startswith("REF_")
    assert "error" not in payload
    assert "extra" not in payload


def test_stripe_stub_without_key():
    result = charge(StripeGateway(delay=0))

    assert result.success is True
    assert result.transaction_id.startswith("pi_")
    assert len(result.transaction_id) == len("pi_") + 24


def test_minor_units():
    assert to_minor_units(Decimal("300.00")) == 30000
    assert to_minor_units(Decimal("19.99")) == 1999


@pytest.fixture
def live_stripe(settings):
    settings.STRIPE_USE_STUB = False
    settings.STRIPE_SECRET_KEY = "sk_test_dummy"


def test_stripe_creates_confirmed_intent(live_stripe, monkeypatch):
    calls = []

    def fake_create(**params):
        calls.append(params)
        return SimpleNamespace(id="pi_live123", status="succeeded")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)

    fields = {"payment_method_id": "pm_card_visa", "idempotency_key": "booking-7-abc"}

    result = charge(StripeGateway(delay=0), fields, amount="300.00", currency="EUR")

    assert result.success is True
    assert result.transaction_id == "pi_live123"
    assert result.extra == {"stripe_status": "succeeded"}
    assert calls[0]["amount"] == 30000
    assert calls[0]["currency"] == "eur"
    assert calls[0]["confirm"] is True
    assert calls[0]["payment_method"] == "pm_card_visa"
    assert calls[0]["idempotency_key"] == "booking-7-abc"


def test_stripe_incomplete_intent_fails(live_stripe, monkeypatch):
    monkeypatch.setattr(
        stripe.PaymentIntent,
        "create",
        lambda **params: SimpleNamespace(id="pi_live456", status="requires_action"),
    )

    result = charge(StripeGateway(delay=0))

    assert result.success is False
    assert result.code == "STRIPE_INCOMPLETE"
    assert result.transaction_id == "pi_live456"


def test_stripe_error_becomes_decline(live_stripe, monkeypatch):
    def fail(**params):
        raise stripe.StripeError("Your card was declined.")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fail)

    result = charge(StripeGateway(delay=0))

    assert result.success is False
    assert result.error == "Your card was declined."
    assert result.code == "STRIPE_ERROR"
