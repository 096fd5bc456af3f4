"""
Plain records exchanged between the booking workflow and its storage backends.

Every ``BookingStore`` implementation returns these instead of ORM instances so
the workflow behaves identically on the relational and in-memory backends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional


@dataclass
class Actor:
    """The user on whose behalf a workflow operation runs."""

    id: int
    role: str = "customer"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_merchant(self) -> bool:
        return self.role == "merchant"

    @classmethod
    def from_user(cls, user) -> "Actor":
        role = "admin" if getattr(user, "is_admin", False) else getattr(user, "role", "customer")
        return cls(id=user.id, role=role)


@dataclass
class PropertyRecord:
    id: int
    name: str
    location: str
    price_per_night: Decimal
    currency: str
    max_guests: int
    status: str
    merchant_id: Optional[int] = None


@dataclass
class BookingRecord:
    property_id: int
    customer_id: int
    check_in: date
    check_out: date
    guests: int
    total_price: Decimal
    currency: str
    status: str
    payment_status: str
    special_requests: str = ""
    payment_id: Optional[int] = None
    payment_method: str = ""
    id: Optional[int] = None
    merchant_id: Optional[int] = None
    property_name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


@dataclass
class PaymentRecord:
    booking_id: int
    payer_id: int
    amount: Decimal
    currency: str
    method: str
    status: str
    transaction_id: str = ""
    gateway_response: Dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
