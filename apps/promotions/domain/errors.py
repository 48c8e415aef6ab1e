from __future__ import annotations


class PromotionDomainError(ValueError):
    pass


class PromoCodeRejectedError(PromotionDomainError):
    def __init__(self, message: str, *, deactivate: bool = False):
        super().__init__(message)
        self.deactivate = deactivate
