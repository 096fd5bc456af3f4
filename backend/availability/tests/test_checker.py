from datetime import date
from decimal import Decimal

import pytest

from availability.services.checker import AvailabilityChecker
from core import errors
from core.records import BookingRecord


def reserve(world, property_id, check_in, check_out, status="pending"):
    customer = world.add_user()
    return world.store.add_booking(
        BookingRecord(
            property_id=property_id,
            customer_id=customer.id,
            check_in=check_in,
            check_out=check_out,
            guests=1,
            total_price=Decimal("0.00"),
            currency="USD",
            status=status,
            payment_status="unpaid",
        )
    )


def test_prices_five_nights(world):
    property_id, _ = world.add_property(price="120.00")

    quote = AvailabilityChecker(world.store).check(property_id, date(2025, 1, 15), date(2025, 1, 20))

    assert quote.available is True
    assert quote.nights == 5
    assert quote.total_price == Decimal("600.00")
    assert quote.property.id == property_id


def test_accepts_iso_strings(world):
    property_id, _ = world.add_property()

    quote = AvailabilityChecker(world.store).check(property_id, "2025-03-01", "2025-03-04")

    assert quote.nights == 3
    assert quote.total_price == Decimal("300.00")


def test_zero_priced_property_quotes_free_stay(world):
    property_id, _ = world.add_property(price="0.00")

    quote = AvailabilityChecker(world.store).check(property_id, "2025-03-01", "2025-03-08")

    assert quote.available is True
    assert quote.total_price == Decimal("0.00")


@pytest.mark.parametrize(
    "check_in, check_out",
    [
        ("2025-03-04", "2025-03-01"),
        ("2025-03-04", "2025-03-04"),
        ("2025-13-01", "2025-13-05"),
        ("next tuesday", "2025-03-05"),
    ],
)
def test_rejects_bad_ranges(world, check_in, check_out):
    property_id, _ = world.add_property()

    with pytest.raises(errors.ValidationError):
        AvailabilityChecker(world.store).check(property_id, check_in, check_out)


def test_unknown_property_is_not_found(world):
    with pytest.raises(errors.NotFound):
        AvailabilityChecker(world.store).check(9999, "2025-03-01", "2025-03-04")


def test_pending_property_can_still_be_checked(world):
    property_id, _ = world.add_property(status="pending")

    quote = AvailabilityChecker(world.store).check(property_id, "2025-03-01", "2025-03-04")

    assert quote.available is True


def test_overlapping_booking_blocks_dates(world):
    property_id, _ = world.add_property()
    reserve(world, property_id, date(2025, 3, 1), date(2025, 3, 4))
    checker = AvailabilityChecker(world.store)

    assert checker.check(property_id, "2025-03-03", "2025-03-05").available is False
    assert checker.check(property_id, "2025-02-27", "2025-03-02").available is False
    assert checker.check(property_id, "2025-02-01", "2025-04-01").available is False


def test_back_to_back_stays_do_not_overlap(world):
    property_id, _ = world.add_property()
    reserve(world, property_id, date(2025, 3, 1), date(2025, 3, 4))
    checker = AvailabilityChecker(world.store)

    assert checker.check(property_id, "2025-03-04", "2025-03-06").available is True
    assert checker.check(property_id, "2025-02-25", "2025-03-01").available is True


@pytest.mark.parametrize("status", ["cancelled", "rejected"])
def test_released_bookings_free_their_dates(world, status):
    property_id, _ = world.add_property()
    reserve(world, property_id, date(2025, 3, 1), date(2025, 3, 4), status=status)

    quote = AvailabilityChecker(world.store).check(property_id, "2025-03-01", "2025-03-04")

    assert quote.available is True


@pytest.mark.parametrize("status", ["pending", "confirmed", "completed"])
def test_held_bookings_keep_their_dates(world, status):
    property_id, _ = world.add_property()
    reserve(world, property_id, date(2025, 3, 1), date(2025, 3, 4), status=status)

    quote = AvailabilityChecker(world.store).check(property_id, "2025-03-02", "2025-03-03")

    assert quote.available is False


def test_exclude_booking_ignores_that_booking(world):
    property_id, _ = world.add_property()
    booking = reserve(world, property_id, date(2025, 3, 1), date(2025, 3, 4))
    checker = AvailabilityChecker(world.store)

    quote = checker.check(property_id, "2025-03-02", "2025-03-05", exclude_booking_id=booking.id)

    assert quote.available is True


def test_other_properties_do_not_interfere(world):
    busy_id, _ = world.add_property()
    free_id, _ = world.add_property()
    reserve(world, busy_id, date(2025, 3, 1), date(2025, 3, 4))

    quote = AvailabilityChecker(world.store).check(free_id, "2025-03-01", "2025-03-04")

    assert quote.available is True


def test_check_is_idempotent(world):
    property_id, _ = world.add_property()
    reserve(world, property_id, date(2025, 3, 1), date(2025, 3, 4))
    checker = AvailabilityChecker(world.store)

    first = checker.check(property_id, "2025-03-03", "2025-03-05")
    second = checker.check(property_id, "2025-03-03", "2025-03-05")

    assert first == second
