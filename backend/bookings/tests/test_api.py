from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from bookings.models import Booking
from properties.models import Property

User = get_user_model()


def make_user(email, role=User.CUSTOMER, **extra):
    return User.objects.create_user(username=email, email=email, password="password123", role=role, **extra)


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def merchant(db):
    return make_user("host@example.com", role=User.MERCHANT)


@pytest.fixture
def customer(db):
    return make_user("guest@example.com")


@pytest.fixture
def admin(db):
    return make_user("ops@example.com", role=User.ADMIN)


@pytest.fixture
def loft(merchant):
    return Property.objects.create(
        merchant=merchant,
        name="Harbour Loft",
        location="Lisbon",
        price_per_night=Decimal("100.00"),
        max_guests=2,
        status=Property.Status.ACTIVE,
    )


def book(client, user, prop, check_in="2025-03-01", check_out="2025-03-04", guests=2):
    client.force_authenticate(user=user)
    return client.post(
        "/api/bookings/",
        {"property_id": prop.id, "check_in": check_in, "check_out": check_out, "guests": guests},
        format="json",
    )


def test_check_availability_is_public(client, loft):
    response = client.get(
        "/api/bookings/check-availability/",
        {"property_id": loft.id, "check_in": "2025-03-01", "check_out": "2025-03-04"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["available"] is True
    assert body["nights"] == 3
    assert body["total_price"] == "300.00"
    assert body["currency"] == "USD"


def test_check_availability_reports_taken_dates(client, customer, loft):
    book(client, customer, loft)
    client.force_authenticate(user=None)

    response = client.get(
        "/api/bookings/check-availability/",
        {"property_id": loft.id, "check_in": "2025-03-02", "check_out": "2025-03-06"},
    )

    assert response.status_code == 200
    assert response.json()["available"] is False


def test_check_availability_validates_range(client, loft):
    response = client.get(
        "/api/bookings/check-availability/",
        {"property_id": loft.id, "check_in": "2025-03-04", "check_out": "2025-03-01"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid"


def test_check_availability_unknown_property(client, db):
    response = client.get(
        "/api/bookings/check-availability/",
        {"property_id": 9999, "check_in": "2025-03-01", "check_out": "2025-03-04"},
    )

    assert response.status_code == 404


def test_create_booking(client, customer, loft):
    response = book(client, customer, loft)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["payment_status"] == "unpaid"
    assert body["total_price"] == "300.00"
    assert body["nights"] == 3
    assert body["property_name"] == "Harbour Loft"
    assert Booking.objects.filter(customer=customer, property=loft).count() == 1


def test_create_requires_authentication(client, loft):
    response = client.post(
        "/api/bookings/",
        {"property_id": loft.id, "check_in": "2025-03-01", "check_out": "2025-03-04"},
        format="json",
    )

    assert response.status_code == 401


def test_overlapping_booking_returns_conflict(client, customer, loft):
    book(client, customer, loft)
    rival = make_user("rival@example.com")

    response = book(client, rival, loft, check_in="2025-03-03", check_out="2025-03-05")

    assert response.status_code == 409
    assert response.json() == {"detail": "Dates already reserved.", "code": "conflict"}


def test_too_many_guests_is_rejected(client, customer, loft):
    response = book(client, customer, loft, guests=3)

    assert response.status_code == 400
    assert response.json()["detail"] == "Guest count exceeds property limit."


def test_list_is_scoped_by_role(client, customer, merchant, admin, loft):
    book(client, customer, loft)
    other_host = make_user("elsewhere@example.com", role=User.MERCHANT)
    cabin = Property.objects.create(
        merchant=other_host, name="Cabin", location="Sintra", price_per_night=Decimal("80.00"), max_guests=4,
        status=Property.Status.ACTIVE,
    )
    book(client, make_user("second@example.com"), cabin)

    client.force_authenticate(user=customer)
    assert len(client.get("/api/bookings/").json()) == 1

    client.force_authenticate(user=merchant)
    mine = client.get("/api/bookings/").json()
    assert [b["property_id"] for b in mine] == [loft.id]

    client.force_authenticate(user=admin)
    assert len(client.get("/api/bookings/").json()) == 2


def test_retrieve_hides_other_customers_bookings(client, customer, loft):
    booking_id = book(client, customer, loft).json()["id"]

    client.force_authenticate(user=make_user("nosy@example.com"))
    response = client.get(f"/api/bookings/{booking_id}/")

    assert response.status_code == 403


def test_retrieve_missing_booking(client, customer):
    client.force_authenticate(user=customer)

    response = client.get("/api/bookings/9999/")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_merchant_confirms_own_booking(client, customer, merchant, loft):
    booking_id = book(client, customer, loft).json()["id"]

    client.force_authenticate(user=merchant)
    response = client.patch(f"/api/bookings/{booking_id}/status/", {"status": "confirmed"}, format="json")

    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"


def test_status_update_rules(client, customer, loft):
    booking_id = book(client, customer, loft).json()["id"]

    client.force_authenticate(user=customer)
    assert client.put(f"/api/bookings/{booking_id}/status/", {"status": "confirmed"}, format="json").status_code == 403

    client.force_authenticate(user=make_user("stranger@example.com", role=User.MERCHANT))
    assert client.put(f"/api/bookings/{booking_id}/status/", {"status": "confirmed"}, format="json").status_code == 403

    client.force_authenticate(user=make_user("root@example.com", is_superuser=True, is_staff=True))
    response = client.put(f"/api/bookings/{booking_id}/status/", {"status": "archived"}, format="json")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status."


def test_customer_cancels_booking(client, customer, loft):
    booking_id = book(client, customer, loft).json()["id"]

    response = client.post(f"/api/bookings/{booking_id}/cancel/")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert book(client, make_user("next@example.com"), loft).status_code == 201


def test_pay_confirms_booking(client, customer, loft):
    booking_id = book(client, customer, loft).json()["id"]

    response = client.post(
        f"/api/bookings/{booking_id}/pay/",
        {"method": "credit_card", "card_number": "4111111111111234", "cvv": "123"},
        format="json",
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["payment"]["amount"] == "300.00"
    assert body["payment"]["transaction_id"].startswith("TXN_")
    assert body["booking"]["status"] == "confirmed"
    assert body["booking"]["payment_status"] == "paid"

    again = client.post(f"/api/bookings/{booking_id}/pay/", {"method": "paypal"}, format="json")
    assert again.status_code == 400
    assert again.json()["detail"] == "Booking already paid."


def test_declined_payment_returns_failure(client, customer, loft):
    booking_id = book(client, customer, loft).json()["id"]

    response = client.post(
        f"/api/bookings/{booking_id}/pay/",
        {"method": "credit_card", "card_number": "4111111111110000"},
        format="json",
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Card declined"
    assert body["payment"]["status"] == "failed"
    assert body["booking"]["payment_status"] == "unpaid"

    history = client.get(f"/api/bookings/{booking_id}/payments/").json()
    assert [p["status"] for p in history] == ["failed"]


def test_only_booking_customer_can_pay(client, customer, merchant, loft):
    booking_id = book(client, customer, loft).json()["id"]

    client.force_authenticate(user=merchant)
    response = client.post(f"/api/bookings/{booking_id}/pay/", {"method": "paypal"}, format="json")

    assert response.status_code == 403
