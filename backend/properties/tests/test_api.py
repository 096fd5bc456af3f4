from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from bookings.models import Booking
from properties.models import Property

User = get_user_model()


def make_user(email, role=User.CUSTOMER):
    return User.objects.create_user(username=email, email=email, password="password123", role=role)


def make_property(merchant, **overrides):
    fields = {
        "name": "Harbour Loft",
        "location": "Lisbon",
        "price_per_night": Decimal("100.00"),
        "max_guests": 2,
        "bedrooms": 1,
        "status": Property.Status.ACTIVE,
    }
    fields.update(overrides)
    return Property.objects.create(merchant=merchant, **fields)


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def merchant(db):
    return make_user("host@example.com", role=User.MERCHANT)


@pytest.fixture
def admin(db):
    return make_user("ops@example.com", role=User.ADMIN)


def test_public_list_shows_active_only(client, merchant):
    live = make_property(merchant)
    make_property(merchant, name="Draft", status=Property.Status.PENDING)
    make_property(merchant, name="Refused", status=Property.Status.REJECTED)

    response = client.get("/api/properties/")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [live.id]


def test_list_filters(client, merchant):
    make_property(merchant, name="Small", location="Porto", price_per_night=Decimal("60.00"), max_guests=2)
    big = make_property(merchant, name="Big", location="Lisbon Centre", price_per_night=Decimal("250.00"), max_guests=6)

    assert [p["id"] for p in client.get("/api/properties/", {"location": "lisbon"}).json()] == [big.id]
    assert [p["id"] for p in client.get("/api/properties/", {"min_price": "100"}).json()] == [big.id]
    assert [p["name"] for p in client.get("/api/properties/", {"max_price": "100"}).json()] == ["Small"]
    assert [p["id"] for p in client.get("/api/properties/", {"guests": 5}).json()] == [big.id]


def test_admin_can_list_by_status(client, merchant, admin):
    pending = make_property(merchant, status=Property.Status.PENDING)
    client.force_authenticate(user=admin)

    response = client.get("/api/properties/", {"status": "pending"})

    assert [p["id"] for p in response.json()] == [pending.id]


def test_merchant_creates_pending_property(client, merchant):
    client.force_authenticate(user=merchant)

    response = client.post(
        "/api/properties/",
        {
            "name": "Garden Studio",
            "location": "Braga",
            "price_per_night": "75.00",
            "max_guests": 2,
            "currency": "eur",
            "amenities": ["wifi", "kitchen"],
            "status": "active",
        },
        format="json",
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["currency"] == "EUR"
    assert body["merchant"] == merchant.id
    assert Property.objects.get(id=body["id"]).merchant == merchant


def test_customer_cannot_create_property(client, db):
    client.force_authenticate(user=make_user("guest@example.com"))

    response = client.post("/api/properties/", {"name": "Nope", "location": "Faro"}, format="json")

    assert response.status_code == 403


def test_amenities_must_be_strings(client, merchant):
    client.force_authenticate(user=merchant)

    response = client.post(
        "/api/properties/",
        {"name": "Odd", "location": "Faro", "amenities": [1, 2]},
        format="json",
    )

    assert response.status_code == 400
    assert "amenities" in response.json()


def test_admin_approves_and_rejects(client, merchant, admin):
    prop = make_property(merchant, status=Property.Status.PENDING)

    client.force_authenticate(user=merchant)
    assert client.post(f"/api/properties/{prop.id}/approve/").status_code == 403

    client.force_authenticate(user=admin)
    approved = client.post(f"/api/properties/{prop.id}/approve/")
    assert approved.status_code == 200
    assert approved.json()["status"] == "active"

    rejected = client.post(f"/api/properties/{prop.id}/reject/")
    assert rejected.json()["status"] == "rejected"


def test_other_merchant_cannot_edit(client, merchant):
    prop = make_property(merchant)
    client.force_authenticate(user=make_user("rival@example.com", role=User.MERCHANT))

    response = client.patch(f"/api/properties/{prop.id}/", {"name": "Mine now"}, format="json")

    assert response.status_code == 403


def test_booked_property_only_allows_price_changes(client, merchant):
    prop = make_property(merchant)
    Booking.objects.create(
        property=prop,
        customer=make_user("guest@example.com"),
        check_in=date(2025, 3, 1),
        check_out=date(2025, 3, 4),
        total_price=Decimal("300.00"),
    )
    client.force_authenticate(user=merchant)

    repriced = client.patch(f"/api/properties/{prop.id}/", {"price_per_night": "120.00"}, format="json")
    assert repriced.status_code == 200
    assert repriced.json()["price_per_night"] == "120.00"

    renamed = client.patch(f"/api/properties/{prop.id}/", {"name": "New name"}, format="json")
    assert renamed.status_code == 400
    assert "name" in renamed.json()


def test_delete_rules(client, merchant):
    empty = make_property(merchant, name="Empty")
    booked = make_property(merchant, name="Booked")
    Booking.objects.create(
        property=booked,
        customer=make_user("guest@example.com"),
        check_in=date(2025, 3, 1),
        check_out=date(2025, 3, 4),
    )
    client.force_authenticate(user=merchant)

    assert client.delete(f"/api/properties/{empty.id}/").status_code == 204
    conflict = client.delete(f"/api/properties/{booked.id}/")
    assert conflict.status_code == 409
    assert conflict.json()["code"] == "conflict"
    assert Property.objects.filter(id=booked.id).exists()


def test_featured_limits_results(client, merchant):
    for index in range(8):
        make_property(merchant, name=f"Flat {index}")
    make_property(merchant, name="Hidden", status=Property.Status.PENDING)

    default = client.get("/api/properties/featured/").json()
    assert len(default) == 6
    assert "Hidden" not in {p["name"] for p in default}
    assert len(client.get("/api/properties/featured/", {"limit": 3}).json()) == 3


def test_property_availability_action(client, merchant):
    prop = make_property(merchant, price_per_night=Decimal("80.00"))

    response = client.get(
        f"/api/properties/{prop.id}/availability/",
        {"check_in": "2025-05-10", "check_out": "2025-05-12"},
    )

    assert response.status_code == 200
    assert response.json()["total_price"] == "160.00"
    assert response.json()["available"] is True
