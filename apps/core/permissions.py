"""
Role-based permission classes for the REST API.
"""

from rest_framework import permissions


class IsStoreAdmin(permissions.BasePermission):
    """Allow administrators and super administrators only."""

    message = "Only store administrators can perform this action."

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.is_admin_role()


class IsAdminOrReadOnly(permissions.BasePermission):
    """Any authenticated user may read; only administrators may write."""

    message = "Only store administrators can modify this resource."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_admin_role()


class CanUsePOS(permissions.BasePermission):
    """Allow roles that operate the point of sale."""

    message = "Your role cannot process sales."

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.can_use_pos()


class HasBranchAccess(permissions.BasePermission):
    """
    Ensure non-admin users only touch records of their own branch.
    """

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.is_active

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.can_switch_branch() or not user.branch_id:
            return True
        branch_id = getattr(obj, "branch_id", None)
        return branch_id is None or branch_id == user.branch_id
