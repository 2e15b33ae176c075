# ==================== UTILS/PERMISSIONS.PY ====================
from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """Staff accounts act as parking lot admins / attendants"""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)


class IsAdminOrReadOnly(permissions.BasePermission):
    """Any authenticated user can read; only admins can write"""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_staff


class IsLotAdmin(permissions.BasePermission):
    """Permission to check if user is the admin owning the parking lot"""

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.admin == request.user
