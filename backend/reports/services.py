from django.contrib.auth import get_user_model
from django.db.models import Count, Q

from bookings.services.lifecycle import BookingService
from payments.services import PaymentProcessor
from properties.models import Property

User = get_user_model()


def property_stats(merchant_id=None) -> dict:
    queryset = Property.objects.all()
    if merchant_id is not None:
        queryset = queryset.filter(merchant_id=merchant_id)
    return queryset.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(status=Property.Status.ACTIVE)),
        pending=Count("id", filter=Q(status=Property.Status.PENDING)),
        rejected=Count("id", filter=Q(status=Property.Status.REJECTED)),
    )


def user_breakdown() -> dict:
    """Count users per effective role; superusers are reported as admins."""
    breakdown = {role: 0 for role, _ in User.ROLES}
    rows = (
        User.objects.values("role", "is_superuser")
        .annotate(count=Count("id"))
    )
    total = 0
    for row in rows:
        role = User.ADMIN if row["is_superuser"] else row["role"]
        breakdown[role] = breakdown.get(role, 0) + row["count"]
        total += row["count"]
    return {"total": total, "breakdown": breakdown}


def platform_analytics(start_date=None, end_date=None) -> dict:
    return {
        "properties": property_stats(),
        "bookings": BookingService().stats(start_date=start_date, end_date=end_date),
        "payments": PaymentProcessor().stats(start_date=start_date, end_date=end_date),
        "users": user_breakdown(),
    }


def merchant_dashboard(merchant_id, start_date=None, end_date=None) -> dict:
    return {
        "properties": property_stats(merchant_id=merchant_id),
        "bookings": BookingService().stats(
            merchant_id=merchant_id,
            start_date=start_date,
            end_date=end_date,
        ),
    }
