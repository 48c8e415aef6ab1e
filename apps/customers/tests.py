from __future__ import annotations

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from apps.customers.application.services.address_listing_cache import AddressListingCache
from apps.customers.application.use_cases.create_address import CreateAddressCommand, CreateAddressUseCase
from apps.customers.application.use_cases.delete_address import DeleteAddressCommand, DeleteAddressUseCase
from apps.customers.application.use_cases.get_addresses import (
    GetAddressCommand,
    GetAddressUseCase,
    GetDefaultAddressCommand,
    GetDefaultAddressUseCase,
    ListAddressesCommand,
    ListAddressesUseCase,
)
from apps.customers.application.use_cases.set_default_address import (
    SetDefaultAddressCommand,
    SetDefaultAddressUseCase,
)
from apps.customers.application.use_cases.update_address import UpdateAddressCommand, UpdateAddressUseCase
from apps.customers.domain.errors import AddressValidationError
from apps.customers.domain.policies import (
    is_valid_cambodia_phone,
    sanitize_name,
    validate_address_fields,
)
from apps.customers.models import Address


def address_data(**overrides) -> dict:
    data = {
        "first_name": "sok",
        "last_name": "dara",
        "phone_number": "012345678",
        "street_address": "Street 271, Toul Tompoung",
        "apartment": "",
        "country": "Cambodia",
        "city_province": "Phnom Penh",
        "is_default": False,
    }
    data.update(overrides)
    return data


class AddressPolicyTests(SimpleTestCase):
    def test_sanitize_name(self):
        self.assertEqual(sanitize_name("  john   DOE "), "John Doe")
        self.assertEqual(sanitize_name(""), "")
        self.assertEqual(sanitize_name(None), "")

    def test_cambodia_phone_pattern(self):
        self.assertTrue(is_valid_cambodia_phone("012345678"))
        self.assertTrue(is_valid_cambodia_phone("+85512345678"))
        self.assertTrue(is_valid_cambodia_phone("0961234567"))
        self.assertFalse(is_valid_cambodia_phone("123"))
        self.assertFalse(is_valid_cambodia_phone("+66812345678"))
        self.assertFalse(is_valid_cambodia_phone(""))

    def test_first_failing_field_is_reported(self):
        with self.assertRaises(AddressValidationError) as ctx:
            validate_address_fields(address_data(last_name="x", phone_number="123"))
        self.assertEqual(ctx.exception.field, "last_name")

    def test_enum_fields(self):
        with self.assertRaises(AddressValidationError) as ctx:
            validate_address_fields(address_data(country="Thailand"))
        self.assertEqual(ctx.exception.field, "country")
        with self.assertRaises(AddressValidationError) as ctx:
            validate_address_fields(address_data(city_province="Bangkok"))
        self.assertEqual(ctx.exception.field, "city_province")

    def test_sanitizes_validated_fields(self):
        fields = validate_address_fields(
            address_data(first_name="  sok  ", street_address="  Street 63  ", apartment="   ")
        )
        self.assertEqual(fields.first_name, "Sok")
        self.assertEqual(fields.street_address, "Street 63")
        self.assertIsNone(fields.apartment)


    def test_default_flag_is_parsed_strictly(self):
        self.assertFalse(validate_address_fields(address_data(is_default="false")).is_default)
        self.assertTrue(validate_address_fields(address_data(is_default="true")).is_default)
        self.assertFalse(validate_address_fields(address_data(is_default=None)).is_default)
        with self.assertRaises(AddressValidationError) as ctx:
            validate_address_fields(address_data(is_default="maybe"))
        self.assertEqual(ctx.exception.field, "is_default")

    def test_non_string_values_are_validation_errors(self):
        with self.assertRaises(AddressValidationError) as ctx:
            validate_address_fields(address_data(country=["Cambodia"]))
        self.assertEqual(ctx.exception.field, "country")
        with self.assertRaises(AddressValidationError) as ctx:
            validate_address_fields(address_data(city_province={"name": "Kep"}))
        self.assertEqual(ctx.exception.field, "city_province")
        with self.assertRaises(AddressValidationError) as ctx:
            validate_address_fields(address_data(phone_number=12345678))
        self.assertEqual(ctx.exception.field, "phone_number")


class AddressUseCaseTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        cache.clear()
        User = get_user_model()
        self.alice = User.objects.create_user(username="alice", password="StrongPass12345!")
        self.bob = User.objects.create_user(username="bob", password="StrongPass12345!")

    def _create(self, user, **overrides):
        result = CreateAddressUseCase.execute(CreateAddressCommand(customer_id=user.id, data=address_data(**overrides)))
        self.assertTrue(result.success, result.error)
        return result.address

    def test_create_address_sanitizes_and_persists(self):
        address = self._create(self.alice, first_name="  sok   sopheap ")
        self.assertEqual(address.first_name, "Sok Sopheap")
        self.assertEqual(address.customer_id, self.alice.id)
        self.assertIsNone(address.apartment)

    def test_invalid_phone_rejected_without_persisting(self):
        result = CreateAddressUseCase.execute(
            CreateAddressCommand(customer_id=self.alice.id, data=address_data(phone_number="123"))
        )
        self.assertFalse(result.success)
        self.assertEqual(result.field, "phone_number")
        self.assertEqual(result.error, "Please enter a valid Cambodian phone number")
        self.assertFalse(Address.objects.exists())

    def test_international_phone_format_accepted(self):
        address = self._create(self.alice, phone_number="+85512345678")
        self.assertEqual(address.phone_number, "+85512345678")

    def test_get_address_is_scoped_to_customer(self):
        address = self._create(self.alice)
        own = GetAddressUseCase.execute(GetAddressCommand(customer_id=self.alice.id, address_id=address.id))
        self.assertTrue(own.success)
        foreign = GetAddressUseCase.execute(GetAddressCommand(customer_id=self.bob.id, address_id=address.id))
        self.assertFalse(foreign.success)
        self.assertIsNone(foreign.address)
        self.assertEqual(foreign.error_code, "not_found")

    def test_set_default_keeps_a_single_default(self):
        first = self._create(self.alice)
        result = SetDefaultAddressUseCase.execute(
            SetDefaultAddressCommand(address_id=first.id, customer_id=self.alice.id)
        )
        self.assertTrue(result.success)
        first.refresh_from_db()
        self.assertTrue(first.is_default)

        second = self._create(self.alice)
        SetDefaultAddressUseCase.execute(SetDefaultAddressCommand(address_id=second.id, customer_id=self.alice.id))
        first.refresh_from_db()
        second.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)
        self.assertEqual(Address.objects.filter(customer=self.alice, is_default=True).count(), 1)

    def test_set_default_rejects_other_customers_address(self):
        address = self._create(self.alice)
        result = SetDefaultAddressUseCase.execute(
            SetDefaultAddressCommand(address_id=address.id, customer_id=self.bob.id)
        )
        self.assertFalse(result.success)
        address.refresh_from_db()
        self.assertFalse(address.is_default)

    def test_create_as_default_replaces_previous_default(self):
        first = self._create(self.alice, is_default=True)
        second = self._create(self.alice, is_default=True)
        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)

    def test_defaults_are_independent_per_customer(self):
        self._create(self.alice, is_default=True)
        self._create(self.bob, is_default=True)
        self.assertEqual(Address.objects.filter(is_default=True).count(), 2)

    def test_list_orders_default_first_then_newest(self):
        oldest = self._create(self.alice)
        default = self._create(self.alice)
        newest = self._create(self.alice)
        SetDefaultAddressUseCase.execute(SetDefaultAddressCommand(address_id=default.id, customer_id=self.alice.id))

        result = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id))
        self.assertEqual([a.id for a in result.addresses], [default.id, newest.id, oldest.id])

    def test_listing_cache_is_invalidated_on_mutation(self):
        self._create(self.alice)
        first = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id))
        self.assertEqual(len(first.addresses), 1)

        self._create(self.alice)
        second = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id))
        self.assertEqual(len(second.addresses), 2)

    def test_listing_read_before_a_concurrent_write_is_not_served(self):
        self._create(self.alice)
        real_store = AddressListingCache.store

        def store_after_concurrent_create(customer_id, version, addresses):
            self._create(self.alice)
            real_store(customer_id, version, addresses)

        with patch.object(AddressListingCache, "store", side_effect=store_after_concurrent_create):
            first = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id))
        self.assertEqual(len(first.addresses), 1)

        second = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id))
        self.assertEqual(len(second.addresses), Address.objects.filter(customer=self.alice).count())
        self.assertEqual(len(second.addresses), 2)

    def test_direct_model_writes_invalidate_listing(self):
        kept = self._create(self.alice)
        removed = self._create(self.alice)
        self.assertEqual(len(ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id)).addresses), 2)

        Address.objects.filter(id=removed.id).delete()
        listed = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id)).addresses
        self.assertEqual([a.id for a in listed], [kept.id])

        kept.city_province = "Kep"
        kept.save()
        listed = ListAddressesUseCase.execute(ListAddressesCommand(customer_id=self.alice.id)).addresses
        self.assertEqual(listed[0].city_province, "Kep")

    def test_listing_is_invalidated_again_on_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            self._create(self.alice)
        version = AddressListingCache.version(self.alice.id)
        self.assertTrue(callbacks)
        for callback in callbacks:
            callback()
        self.assertNotEqual(AddressListingCache.version(self.alice.id), version)

    def test_storage_failure_on_create(self):
        with patch.object(Address.objects, "create", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.customers", level="ERROR") as logs:
                result = CreateAddressUseCase.execute(CreateAddressCommand(customer_id=self.alice.id, data=address_data()))
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Failed to create address")
        self.assertEqual(result.error_code, "storage_error")
        self.assertIn("address_create_failed", logs.output[0])

    def test_update_address(self):
        address = self._create(self.alice)
        result = UpdateAddressUseCase.execute(
            UpdateAddressCommand(
                address_id=address.id,
                customer_id=self.alice.id,
                data=address_data(city_province="Siem Reap", apartment=" 4B "),
            )
        )
        self.assertTrue(result.success)
        address.refresh_from_db()
        self.assertEqual(address.city_province, "Siem Reap")
        self.assertEqual(address.apartment, "4B")

    def test_update_is_scoped_to_customer(self):
        address = self._create(self.alice)
        result = UpdateAddressUseCase.execute(
            UpdateAddressCommand(address_id=address.id, customer_id=self.bob.id, data=address_data())
        )
        self.assertFalse(result.success)
        self.assertEqual(result.error_code, "not_found")

    def test_delete_address(self):
        address = self._create(self.alice)
        missing = DeleteAddressUseCase.execute(DeleteAddressCommand(address_id=address.id, customer_id=self.bob.id))
        self.assertFalse(missing.success)
        self.assertTrue(Address.objects.filter(id=address.id).exists())

        deleted = DeleteAddressUseCase.execute(DeleteAddressCommand(address_id=address.id, customer_id=self.alice.id))
        self.assertTrue(deleted.success)
        self.assertFalse(Address.objects.filter(id=address.id).exists())

    def test_get_default_address(self):
        self.assertFalse(GetDefaultAddressUseCase.execute(GetDefaultAddressCommand(customer_id=self.alice.id)).success)
        address = self._create(self.alice, is_default=True)
        result = GetDefaultAddressUseCase.execute(GetDefaultAddressCommand(customer_id=self.alice.id))
        self.assertEqual(result.address.id, address.id)


class AddressApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        cache.clear()
        User = get_user_model()
        self.alice = User.objects.create_user(username="alice", password="StrongPass12345!")
        self.bob = User.objects.create_user(username="bob", password="StrongPass12345!")
        self.client = APIClient()
        self.client.force_authenticate(user=self.alice)

    def test_requires_authentication(self):
        response = APIClient().get("/api/addresses/")
        self.assertEqual(response.status_code, 401)

    def test_create_and_list(self):
        response = self.client.post("/api/addresses/", data=address_data(), format="json")
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["data"]["address"]["first_name"], "Sok")

        listing = self.client.get("/api/addresses/")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(len(listing.json()["data"]["addresses"]), 1)

    def test_invalid_phone_returns_field_error(self):
        response = self.client.post("/api/addresses/", data=address_data(phone_number="123"), format="json")
        self.assertEqual(response.status_code, 400)
        payload = response.json()
        self.assertFalse(payload["success"])
        self.assertEqual(payload["error"]["field"], "phone_number")

    def test_foreign_address_is_not_found(self):
        other = Address.objects.create(customer=self.bob, **validate_address_fields(address_data()).as_model_fields())
        self.assertEqual(self.client.get(f"/api/addresses/{other.id}/").status_code, 404)
        self.assertEqual(self.client.delete(f"/api/addresses/{other.id}/").status_code, 404)
        self.assertEqual(self.client.post(f"/api/addresses/{other.id}/default/").status_code, 404)

    def test_set_default_and_fetch_default(self):
        created = self.client.post("/api/addresses/", data=address_data(), format="json").json()
        address_id = created["data"]["address"]["id"]

        response = self.client.post(f"/api/addresses/{address_id}/default/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["address"]["is_default"])

        default = self.client.get("/api/addresses/default/")
        self.assertEqual(default.json()["data"]["address"]["id"], address_id)

    def test_update_and_delete(self):
        created = self.client.post("/api/addresses/", data=address_data(), format="json").json()
        address_id = created["data"]["address"]["id"]

        updated = self.client.put(
            f"/api/addresses/{address_id}/", data=address_data(city_province="Kampot"), format="json"
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["data"]["address"]["city_province"], "Kampot")

        deleted = self.client.delete(f"/api/addresses/{address_id}/")
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(self.client.get(f"/api/addresses/{address_id}/").status_code, 404)

    def test_listing_storage_failure_is_500(self):
        with patch.object(Address.objects, "filter", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.customers", level="ERROR"):
                response = self.client.get("/api/addresses/")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["message"], "Failed to fetch customer addresses")
