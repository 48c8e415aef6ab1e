from __future__ import annotations

from rest_framework.permissions import BasePermission

from apps.accounts.application.services.identity_service import AccountIdentityService


class IsAdminRole(BasePermission):
    message = "Unauthorized - admin role required."

    def has_permission(self, request, view) -> bool:
        return AccountIdentityService.is_admin(user=request.user)
