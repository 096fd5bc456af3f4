from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User
from bookings.models import Booking
from bookings.services.lifecycle import BookingService
from core.records import Actor
from payments.gateways import CreditCardGateway, PayPalGateway
from payments.services import PaymentProcessor
from properties.models import Property


SEED_PASSWORD = "Staynest123!"
SUPERUSER_EMAIL = "admin@staynest.test"
SUPERUSER_PASSWORD = "AdminStaynest123!"

PROPERTIES = [
    {
        "name": "Harbour View Loft",
        "location": "Lisbon, Portugal",
        "address": "Rua da Prata 12",
        "description": "Bright loft two streets from the river.",
        "bedrooms": 1,
        "bathrooms": 1,
        "max_guests": 2,
        "price_per_night": Decimal("100.00"),
        "amenities": ["wifi", "kitchen", "washer"],
        "status": Property.Status.ACTIVE,
    },
    {
        "name": "Pine Ridge Cabin",
        "location": "Asheville, NC",
        "address": "44 Ridge Road",
        "description": "Wood cabin with a hot tub and mountain views.",
        "bedrooms": 3,
        "bathrooms": 2,
        "max_guests": 6,
        "price_per_night": Decimal("240.00"),
        "amenities": ["wifi", "hot tub", "fireplace", "parking"],
        "status": Property.Status.ACTIVE,
    },
    {
        "name": "Community Hostel Bunk",
        "location": "Berlin, Germany",
        "address": "Oranienstrasse 5",
        "description": "Free demo listing for trying the checkout flow.",
        "bedrooms": 1,
        "bathrooms": 1,
        "max_guests": 1,
        "price_per_night": Decimal("0.00"),
        "amenities": ["wifi"],
        "status": Property.Status.ACTIVE,
    },
    {
        "name": "Canal House Studio",
        "location": "Amsterdam, Netherlands",
        "address": "Prinsengracht 210",
        "description": "Awaiting review.",
        "bedrooms": 1,
        "bathrooms": 1,
        "max_guests": 2,
        "price_per_night": Decimal("180.00"),
        "amenities": ["wifi", "bikes"],
        "status": Property.Status.PENDING,
    },
]


class Command(BaseCommand):
    help = "Populate the local development database with sample data."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Ensuring admin superuser"))
            self._ensure_superuser()

            self.stdout.write(self.style.MIGRATE_HEADING("Creating users"))
            merchant = self._ensure_user(
                email="merchant@staynest.test",
                first_name="Mira",
                last_name="Merchant",
                role=User.MERCHANT,
            )
            casey = self._ensure_user(
                email="casey@example.test",
                first_name="Casey",
                last_name="Customer",
                role=User.CUSTOMER,
            )
            robin = self._ensure_user(
                email="robin@example.test",
                first_name="Robin",
                last_name="Traveller",
                role=User.CUSTOMER,
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating properties"))
            listings = {}
            for listing in PROPERTIES:
                prop, _ = Property.objects.update_or_create(
                    merchant=merchant,
                    name=listing["name"],
                    defaults={key: value for key, value in listing.items() if key != "name"},
                )
                listings[prop.name] = prop

        self.stdout.write(self.style.MIGRATE_HEADING("Creating bookings & payments"))
        if Booking.objects.filter(customer__in=[casey, robin]).exists():
            self.stdout.write("Sample bookings already present; skipping.")
        else:
            self._seed_bookings(listings, casey, robin)

        self.stdout.write(self.style.SUCCESS("Development data ready."))
        self.stdout.write(f"Admin login: {SUPERUSER_EMAIL} / {SUPERUSER_PASSWORD}")
        self.stdout.write(f"Other seeded users share the password {SEED_PASSWORD!r}.")

    def _seed_bookings(self, listings, casey, robin):
        bookings = BookingService()
        # No simulated latency while seeding.
        payments = PaymentProcessor(
            gateways={
                "credit_card": CreditCardGateway(delay=0),
                "paypal": PayPalGateway(delay=0),
            }
        )
        start = date.today() + timedelta(days=14)

        loft = bookings.create(
            listings["Harbour View Loft"].id,
            start,
            start + timedelta(days=3),
            2,
            Actor.from_user(casey),
            special_requests="Late check-in, around 22:00.",
        )
        payments.process(loft.id, casey.id, {"method": "credit_card", "card_number": "4242424242421234"})

        cabin = bookings.create(
            listings["Pine Ridge Cabin"].id,
            start + timedelta(days=7),
            start + timedelta(days=10),
            4,
            Actor.from_user(robin),
        )
        payments.process(cabin.id, robin.id, {"method": "credit_card", "card_number": "4000000000000000"})

        bunk = bookings.create(
            listings["Community Hostel Bunk"].id,
            start,
            start + timedelta(days=2),
            1,
            Actor.from_user(robin),
        )
        payments.process(bunk.id, robin.id, {"method": "paypal"})

    def _ensure_user(self, email: str, first_name: str, last_name: str, role: str) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "first_name": first_name,
                "last_name": last_name,
                "display_name": f"{first_name} {last_name}",
                "role": role,
            },
        )
        if created:
            user.set_password(SEED_PASSWORD)
            user.save()
        elif user.role != role:
            user.role = role
            user.save(update_fields=["role"])
        return user

    def _ensure_superuser(self) -> User:
        user, created = User.objects.get_or_create(
            email=SUPERUSER_EMAIL,
            defaults={
                "username": SUPERUSER_EMAIL,
                "first_name": "Admin",
                "last_name": "User",
                "display_name": "Admin User",
                "role": User.ADMIN,
                "is_staff": True,
                "is_superuser": True,
            },
        )
        flag_updates = {}
        if not user.is_staff:
            flag_updates["is_staff"] = True
        if not user.is_superuser:
            flag_updates["is_superuser"] = True
        if flag_updates:
            for attr, value in flag_updates.items():
                setattr(user, attr, value)
            user.save(update_fields=list(flag_updates.keys()))
        if created or not user.has_usable_password():
            user.set_password(SUPERUSER_PASSWORD)
            user.save(update_fields=["password"])
        return user
