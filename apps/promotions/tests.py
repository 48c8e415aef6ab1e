from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from apps.promotions.application.services.promo_code_usage import PromoCodeUsageService
from apps.promotions.application.use_cases.validate_promo_code import (
    ValidatePromoCodeCommand,
    ValidatePromoCodeUseCase,
)
from apps.promotions.domain.errors import PromoCodeRejectedError
from apps.promotions.domain.policies import ensure_redeemable, sanitize_code
from apps.promotions.models import PromoCode, PromoCodeUsage


class PromoCodePolicyTests(TestCase):
    def test_sanitize_code(self):
        self.assertEqual(sanitize_code("  welcome 10 "), "WELCOME10")
        self.assertEqual(sanitize_code("summer\tsale"), "SUMMERSALE")
        self.assertEqual(sanitize_code(None), "")
        self.assertEqual(sanitize_code(["WELCOME10"]), "")

    def test_rules_are_checked_in_order(self):
        promo = PromoCode(code="X", discount_percentage=10, max_total_uses=2, total_uses=2, is_active=False)
        now = timezone.now()
        with self.assertRaisesMessage(PromoCodeRejectedError, "no longer active"):
            ensure_redeemable(promo, customer_uses=0, now=now)

        promo.is_active = True
        with self.assertRaises(PromoCodeRejectedError) as ctx:
            ensure_redeemable(promo, customer_uses=0, now=now)
        self.assertEqual(str(ctx.exception), "This coupon has reached its usage limit")
        self.assertTrue(ctx.exception.deactivate)

        promo.total_uses = 0
        with self.assertRaisesMessage(PromoCodeRejectedError, "maximum number of times"):
            ensure_redeemable(promo, customer_uses=1, now=now)
        ensure_redeemable(promo, customer_uses=0, now=now)


class ValidatePromoCodeTests(TestCase):
    def setUp(self) -> None:
        self.alice = get_user_model().objects.create_user(username="alice", password="StrongPass12345!")
        self.promo = PromoCode.objects.create(
            code="WELCOME10", discount_percentage=10, max_uses_per_customer=2, max_total_uses=10, total_uses=3
        )

    def validate(self, code):
        return ValidatePromoCodeUseCase.execute(ValidatePromoCodeCommand(customer_id=self.alice.id, code=code))

    def test_valid_code_reports_remaining_uses(self):
        PromoCodeUsage.objects.create(promo_code=self.promo, customer=self.alice)
        result = self.validate(" welcome10 ")
        self.assertTrue(result.success)
        self.assertEqual(result.promo_code.id, self.promo.id)
        self.assertEqual(result.remaining_uses, 7)
        self.assertEqual(result.customer_remaining_uses, 1)

    def test_unlimited_code_has_no_remaining_total(self):
        PromoCode.objects.create(code="FOREVER", discount_percentage=5)
        result = self.validate("FOREVER")
        self.assertTrue(result.success)
        self.assertIsNone(result.remaining_uses)

    def test_unknown_blank_and_deleted_codes_are_invalid(self):
        PromoCode.objects.create(code="GONE", discount_percentage=5, deleted_at=timezone.now())
        for code in ("NOPE", "", "   ", "GONE"):
            result = self.validate(code)
            self.assertEqual(result.error, "Invalid coupon code. Please check the code and try again.")
            self.assertEqual(result.error_code, "validation_error")
            self.assertEqual(result.field, "code")

    def test_validity_window(self):
        now = timezone.now()
        PromoCode.objects.create(code="SOON", discount_percentage=5, valid_from=now + timedelta(days=1))
        PromoCode.objects.create(code="OLD", discount_percentage=5, valid_until=now - timedelta(days=1))
        self.assertEqual(self.validate("SOON").error, "This coupon is not yet valid and cannot be applied")
        self.assertEqual(self.validate("OLD").error, "This coupon has expired and cannot be applied.")

    def test_exhausted_code_is_deactivated(self):
        self.promo.total_uses = 10
        self.promo.save(update_fields=["total_uses"])
        result = self.validate("WELCOME10")
        self.assertEqual(result.error, "This coupon has reached its usage limit")
        self.promo.refresh_from_db()
        self.assertFalse(self.promo.is_active)

        again = self.validate("WELCOME10")
        self.assertIn("no longer active", again.error)

    def test_per_customer_limit(self):
        for _ in range(2):
            PromoCodeUsage.objects.create(promo_code=self.promo, customer=self.alice)
        result = self.validate("WELCOME10")
        self.assertEqual(result.error, "You have already used this coupon the maximum number of times")

    def test_validation_records_nothing(self):
        self.validate("WELCOME10")
        self.promo.refresh_from_db()
        self.assertEqual(self.promo.total_uses, 3)
        self.assertFalse(PromoCodeUsage.objects.exists())

    def test_storage_failure(self):
        with patch.object(PromoCode.objects, "filter", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.promotions", level="ERROR") as logs:
                result = self.validate("WELCOME10")
        self.assertEqual(result.error, "Failed to validate coupon")
        self.assertEqual(result.error_code, "storage_error")
        self.assertIn("promo_code_validate_failed", logs.output[0])


class PromoCodeUsageServiceTests(TestCase):
    def test_record_counts_and_deactivates_at_limit(self):
        alice = get_user_model().objects.create_user(username="alice", password="StrongPass12345!")
        promo = PromoCode.objects.create(code="TWICE", discount_percentage=15, max_total_uses=2)

        PromoCodeUsageService.record(promo_code_id=promo.id, customer_id=alice.id)
        promo.refresh_from_db()
        self.assertEqual(promo.total_uses, 1)
        self.assertTrue(promo.is_active)

        PromoCodeUsageService.record(promo_code_id=promo.id, customer_id=alice.id)
        promo.refresh_from_db()
        self.assertEqual(promo.total_uses, 2)
        self.assertFalse(promo.is_active)
        self.assertEqual(PromoCodeUsage.objects.filter(promo_code=promo, customer=alice).count(), 2)


class PromoCodeApiTests(TestCase):
    def setUp(self) -> None:
        self.alice = get_user_model().objects.create_user(username="alice", password="StrongPass12345!")
        PromoCode.objects.create(code="WELCOME10", description="First order", discount_percentage=10)
        self.client = APIClient()

    def test_requires_authentication(self):
        response = self.client.post("/api/coupons/apply/", data={"code": "WELCOME10"}, format="json")
        self.assertEqual(response.status_code, 401)

    def test_apply_valid_code(self):
        self.client.force_authenticate(user=self.alice)
        response = self.client.post("/api/coupons/apply/", data={"code": "welcome10"}, format="json")
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["coupon"]["code"], "WELCOME10")
        self.assertEqual(data["coupon"]["discount_percentage"], 10)
        self.assertIsNone(data["remaining_uses"])
        self.assertEqual(data["customer_remaining_uses"], 1)

    def test_invalid_code_is_400(self):
        self.client.force_authenticate(user=self.alice)
        response = self.client.post("/api/coupons/apply/", data={"code": "NOPE"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "code")
