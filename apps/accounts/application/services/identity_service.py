from __future__ import annotations

from apps.accounts.domain.errors import AccountNotFoundError, InvalidRoleError
from apps.accounts.models import AccountProfile


class AccountIdentityService:
    """Resolves the `{user, profile, role}` triple the order and payment views depend on."""

    @staticmethod
    def get_profile(*, user_id) -> AccountProfile:
        profile = AccountProfile.objects.select_related("user").filter(user_id=user_id).first()
        if not profile:
            raise AccountNotFoundError("Failed to fetch user profile")
        return profile

    @staticmethod
    def get_role(*, user_id) -> str:
        profile = AccountIdentityService.get_profile(user_id=user_id)
        if profile.role not in {AccountProfile.ROLE_CUSTOMER, AccountProfile.ROLE_ADMIN}:
            raise InvalidRoleError("Invalid user role")
        return profile.role

    @staticmethod
    def is_admin(*, user) -> bool:
        if user is None or not getattr(user, "is_authenticated", False):
            return False
        return AccountProfile.objects.filter(user_id=user.id, role=AccountProfile.ROLE_ADMIN).exists()
