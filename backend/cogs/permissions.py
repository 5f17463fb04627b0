"""
Permissions for the COGS system.

Costs and margins are sensitive business information. Access is restricted
to members of the workspace (and staff).
"""
from rest_framework import permissions


class CanManageWorkspaceCosts(permissions.BasePermission):
    """
    Allows access to staff and members of the workspace in the URL.

    Views resolve the workspace before permission checks and expose it as
    `view.tenant`.
    """
    message = "You do not have permission to manage costs of this workspace."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        tenant = getattr(view, 'tenant', None)
        if tenant is None:
            return request.user.is_staff
        return tenant.has_member(request.user)
