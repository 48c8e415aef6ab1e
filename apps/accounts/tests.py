from __future__ import annotations

from django.apps import apps as django_apps
from django.contrib.auth import get_user_model
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, TestCase, override_settings

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.errors import AccountNotFoundError, InvalidRoleError
from apps.accounts.models import AccountProfile
from apps.common.domain.ownership import belongs_to


class _Owned:
    def __init__(self, customer_id=None, order=None):
        self.customer_id = customer_id
        if order is not None:
            self.order = order


class OwnershipPredicateTests(SimpleTestCase):
    def test_direct_owner_matches(self):
        self.assertTrue(belongs_to(_Owned(customer_id=7), 7))

    def test_string_and_int_ids_compare_equal(self):
        self.assertTrue(belongs_to(_Owned(customer_id=7), "7"))

    def test_other_user_rejected(self):
        self.assertFalse(belongs_to(_Owned(customer_id=7), 8))

    def test_resolves_owner_through_order(self):
        payment = _Owned(order=_Owned(customer_id=3))
        self.assertTrue(belongs_to(payment, 3))
        self.assertFalse(belongs_to(payment, 4))

    def test_missing_entity_or_user_is_never_owned(self):
        self.assertFalse(belongs_to(None, 1))
        self.assertFalse(belongs_to(_Owned(customer_id=1), None))
        self.assertFalse(belongs_to(_Owned(), 1))


class AccountIdentityServiceTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        User = get_user_model()
        self.customer = User.objects.create_user(username="customer1", password="StrongPass12345!")
        self.admin = User.objects.create_user(username="admin1", password="StrongPass12345!")
        AccountProfile.objects.create(user=self.customer, role=AccountProfile.ROLE_CUSTOMER)
        AccountProfile.objects.create(user=self.admin, role=AccountProfile.ROLE_ADMIN)

    def test_role_lookup(self):
        self.assertEqual(AccountIdentityService.get_role(user_id=self.customer.id), "customer")
        self.assertEqual(AccountIdentityService.get_role(user_id=self.admin.id), "admin")

    def test_missing_profile_raises(self):
        stranger = get_user_model().objects.create_user(username="stranger", password="StrongPass12345!")
        with self.assertRaises(AccountNotFoundError):
            AccountIdentityService.get_role(user_id=stranger.id)

    def test_unknown_role_raises(self):
        AccountProfile.objects.filter(user=self.customer).update(role="vendor")
        with self.assertRaises(InvalidRoleError):
            AccountIdentityService.get_role(user_id=self.customer.id)

    def test_is_admin(self):
        self.assertTrue(AccountIdentityService.is_admin(user=self.admin))
        self.assertFalse(AccountIdentityService.is_admin(user=self.customer))
        self.assertFalse(AccountIdentityService.is_admin(user=None))


class AccountsConfigTests(SimpleTestCase):
    @override_settings(ENVIRONMENT="production", DEBUG=True)
    def test_production_refuses_debug(self):
        with self.assertRaises(ImproperlyConfigured):
            django_apps.get_app_config("accounts").ready()

    @override_settings(ENVIRONMENT="production", DEBUG=False, SECRET_KEY="django-insecure-storefront-dev-key")
    def test_production_refuses_dev_secret_key(self):
        with self.assertRaises(ImproperlyConfigured):
            django_apps.get_app_config("accounts").ready()

    @override_settings(ENVIRONMENT="production", DEBUG=False, SECRET_KEY="a-real-production-secret")
    def test_production_with_safe_settings_boots(self):
        django_apps.get_app_config("accounts").ready()
