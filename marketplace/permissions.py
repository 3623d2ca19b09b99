from rest_framework.permissions import BasePermission


class IsAgent(BasePermission):
    """Agents and landlords only."""

    message = "Only agent or landlord accounts can access this endpoint."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_agent", False))
