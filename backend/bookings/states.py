from __future__ import annotations

from django.conf import settings

from .models import Booking

Status = Booking.Status

TRANSITIONS: dict[str, frozenset[str]] = {
    Status.PENDING.value: frozenset({Status.CONFIRMED.value, Status.CANCELLED.value, Status.REJECTED.value}),
    Status.CONFIRMED.value: frozenset({Status.COMPLETED.value, Status.CANCELLED.value}),
    Status.COMPLETED.value: frozenset(),
    Status.CANCELLED.value: frozenset(),
    Status.REJECTED.value: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)

# Bookings in these states never hold their dates.
RELEASED_STATUSES = frozenset({Status.CANCELLED.value, Status.REJECTED.value})

PAYABLE_STATUSES = frozenset({Status.PENDING.value, Status.CONFIRMED.value})


def is_valid_status(value) -> bool:
    return value in Status.values


def can_transition(current: str, target: str) -> bool:
    """Whether ``current -> target`` is allowed; permissive mode accepts any valid target."""
    if not is_valid_status(target):
        return False
    if not getattr(settings, "BOOKING_ENFORCE_TRANSITIONS", True):
        return True
    return str(target) in TRANSITIONS.get(str(current), frozenset())
