from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsAdmin(BasePermission):
    """Platform administrators; superusers automatically pass."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)


class IsMerchant(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_merchant)


class IsMerchantOrAdmin(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_admin or user.is_merchant


class IsOwnerOrAdmin(BasePermission):
    """
    Object-level check for merchant-owned resources.

    Reads are left to the view's queryset; writes require the object's
    ``merchant`` to be the requesting user unless they are an admin.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_admin:
            return True
        return getattr(obj, "merchant_id", None) == user.id
