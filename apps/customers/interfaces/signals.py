from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.customers.application.services.address_listing_cache import AddressListingCache
from apps.customers.models import Address


@receiver(post_save, sender=Address)
def _address_saved(sender, instance: Address, **kwargs):
    AddressListingCache.invalidate_with_commit(instance.customer_id)


@receiver(post_delete, sender=Address)
def _address_deleted(sender, instance: Address, **kwargs):
    AddressListingCache.invalidate_with_commit(instance.customer_id)
