# ==================== UTILS/PERMISSIONS.PY ====================
from rest_framework import permissions


def is_admin(user):
    return bool(user and user.is_authenticated and (user.role == 'admin' or user.is_superuser))


class IsAdmin(permissions.BasePermission):
    """Only users with the admin role"""
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsOwnerRole(permissions.BasePermission):
    """Parking owners and admins may register parking lots"""
    message = 'Only parking owners can manage parkings.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.role == 'owner' or is_admin(user)))


class IsOwnerOrAdmin(permissions.BasePermission):
    """Permission to check if user is owner of the parking lot"""

    def has_object_permission(self, request, view, obj):
        return obj.owner_id == request.user.id or is_admin(request.user)


class CanManageVehicleCount(permissions.BasePermission):
    """Lot owner, staff assigned to the lot, or admin"""
    message = 'Only the parking owner or its staff can update vehicle counts.'

    def has_object_permission(self, request, view, obj):
        user = request.user
        if obj.owner_id == user.id or is_admin(user):
            return True
        return user.role == 'staff' and user.staff_parking_id == obj.id


class IsSubmitterOrAdmin(permissions.BasePermission):
    """Permission for requests - either submitter or admin"""

    def has_object_permission(self, request, view, obj):
        return obj.user_id == request.user.id or is_admin(request.user)
