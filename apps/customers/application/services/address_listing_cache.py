from __future__ import annotations

import uuid

from django.conf import settings
from django.core.cache import cache
from django.db import transaction


class AddressListingCache:
    """
    Per-customer cache of the address listing.

    Entries are keyed by a per-customer version token. Invalidation replaces the
    token instead of deleting the entry, and entries are written with `cache.add`,
    so a listing read before a mutation can never be served after it.
    """

    KEY_PREFIX = "customers:addresses"

    @classmethod
    def _version_key(cls, customer_id) -> str:
        return f"{cls.KEY_PREFIX}:version:{customer_id}"

    @classmethod
    def key(cls, customer_id, version: str) -> str:
        return f"{cls.KEY_PREFIX}:{customer_id}:{version}"

    @classmethod
    def version(cls, customer_id) -> str:
        version_key = cls._version_key(customer_id)
        version = cache.get(version_key)
        if version is None:
            cache.add(version_key, uuid.uuid4().hex, timeout=None)
            version = cache.get(version_key)
        return version

    @classmethod
    def get(cls, customer_id, version: str):
        return cache.get(cls.key(customer_id, version))

    @classmethod
    def store(cls, customer_id, version: str, addresses: list) -> None:
        cache.add(
            cls.key(customer_id, version),
            addresses,
            timeout=getattr(settings, "STOREFRONT_ADDRESS_CACHE_TTL", 300),
        )

    @classmethod
    def invalidate(cls, customer_id) -> None:
        cache.set(cls._version_key(customer_id), uuid.uuid4().hex, timeout=None)

    @classmethod
    def invalidate_with_commit(cls, customer_id) -> None:
        # Once now for readers inside this transaction, once on commit for readers
        # that loaded the pre-commit rows in the meantime.
        cls.invalidate(customer_id)
        transaction.on_commit(lambda: cls.invalidate(customer_id))
