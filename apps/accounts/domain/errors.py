from __future__ import annotations


class AccountDomainError(ValueError):
    pass


class AccountNotFoundError(AccountDomainError):
    pass


class InvalidRoleError(AccountDomainError):
    pass
