import itertools
from decimal import Decimal

import pytest

from core import store
from core.records import Actor, PropertyRecord


@pytest.fixture(autouse=True)
def fast_gateways(settings):
    settings.PAYMENT_GATEWAY_DELAY = 0
    settings.STRIPE_USE_STUB = True
    settings.STRIPE_SECRET_KEY = ""
    yield
    store._instances.clear()


class MemoryWorld:
    """Seeds an ``InMemoryBookingStore`` with properties and users."""

    def __init__(self):
        from core.store.memory import InMemoryBookingStore

        self.store = InMemoryBookingStore()
        self._ids = itertools.count(1)

    def add_property(self, price="100.00", max_guests=2, status="active", currency="USD"):
        merchant = self.add_user("merchant")
        record = self.store.add_property(
            PropertyRecord(
                id=next(self._ids),
                name="Seaside Flat",
                location="Porto",
                price_per_night=Decimal(price),
                currency=currency,
                max_guests=max_guests,
                status=status,
                merchant_id=merchant.id,
            )
        )
        return record.id, merchant

    def add_user(self, role="customer"):
        return Actor(id=next(self._ids), role=role)


class RelationalWorld:
    """Seeds the test database and wraps it in a ``RelationalBookingStore``."""

    def __init__(self):
        from core.store.relational import RelationalBookingStore

        self.store = RelationalBookingStore()
        self._ids = itertools.count(1)

    def add_property(self, price="100.00", max_guests=2, status="active", currency="USD"):
        from properties.models import Property

        merchant = self.add_user("merchant")
        prop = Property.objects.create(
            merchant_id=merchant.id,
            name="Seaside Flat",
            location="Porto",
            price_per_night=Decimal(price),
            currency=currency,
            max_guests=max_guests,
            status=status,
        )
        return prop.id, merchant

    def add_user(self, role="customer"):
        from accounts.models import User

        email = f"{role}{next(self._ids)}@example.com"
        user = User.objects.create_user(username=email, email=email, password="password123", role=role)
        return Actor.from_user(user)


@pytest.fixture(params=["memory", "relational"])
def world(request):
    if request.param == "relational":
        request.getfixturevalue("db")
        return RelationalWorld()
    return MemoryWorld()


@pytest.fixture
def memory_world():
    return MemoryWorld()


@pytest.fixture
def committed_world(transactional_db):
    """A relational world whose rows are committed, so other threads can see them."""
    return RelationalWorld()
