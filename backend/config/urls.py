from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.api import ChangePasswordView, LoginView, MeView, RegisterView
from availability.api import CheckAvailabilityView
from bookings.api import BookingViewSet
from payments.api import AdminPaymentViewSet, PaymentViewSet
from properties.api import PropertyViewSet
from reports.api import (
    AdminAnalyticsView,
    AdminBookingsView,
    AdminUsersView,
    MerchantBookingsView,
    MerchantPropertiesView,
    MerchantStatsView,
)

router = DefaultRouter()
router.register(r"properties", PropertyViewSet, basename="property")
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"payments", PaymentViewSet, basename="payment")
router.register(r"admin/payments", AdminPaymentViewSet, basename="admin-payment")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/register/", RegisterView.as_view(), name="auth-register"),
    path("api/auth/login/", LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),
    path(
        "api/auth/change-password/",
        ChangePasswordView.as_view(),
        name="auth-change-password",
    ),
    path(
        "api/bookings/check-availability/",
        CheckAvailabilityView.as_view(),
        name="booking-check-availability",
    ),
    path("api/admin/users/", AdminUsersView.as_view(), name="admin-users"),
    path("api/admin/analytics/", AdminAnalyticsView.as_view(), name="admin-analytics"),
    path("api/admin/bookings/", AdminBookingsView.as_view(), name="admin-bookings"),
    path(
        "api/merchant/properties/",
        MerchantPropertiesView.as_view(),
        name="merchant-properties",
    ),
    path("api/merchant/bookings/", MerchantBookingsView.as_view(), name="merchant-bookings"),
    path("api/merchant/stats/", MerchantStatsView.as_view(), name="merchant-stats"),
    path("api/", include(router.urls)),
]
