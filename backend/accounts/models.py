from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    CUSTOMER = "customer"
    MERCHANT = "merchant"
    ADMIN = "admin"
    ROLES = [
        (CUSTOMER, "Customer"),
        (MERCHANT, "Merchant"),
        (ADMIN, "Admin"),
    ]

    display_name = models.CharField(max_length=120, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    role = models.CharField(max_length=20, choices=ROLES, default=CUSTOMER)

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == self.ADMIN

    @property
    def is_merchant(self) -> bool:
        return self.role == self.MERCHANT
