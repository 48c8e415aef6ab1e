from __future__ import annotations

import uuid
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from apps.accounts.models import AccountProfile
from apps.cart.models import CartItem
from apps.catalog.models import Color, Product, ProductVariant, Size
from apps.orders.domain.status import generate_order_number
from apps.orders.models import Order, OrderItem
from apps.payments.application.use_cases.confirm_order_payment import (
    ConfirmOrderPaymentCommand,
    ConfirmOrderPaymentUseCase,
)
from apps.payments.application.use_cases.get_payment_with_ownership import (
    GetPaymentWithOwnershipCommand,
    GetPaymentWithOwnershipUseCase,
)
from apps.payments.models import PaymentTransaction
from apps.promotions.models import PromoCode, PromoCodeUsage


class PaymentTestMixin:
    def make_fixture(self) -> None:
        User = get_user_model()
        self.alice = User.objects.create_user(username="alice", password="StrongPass12345!")
        self.bob = User.objects.create_user(username="bob", password="StrongPass12345!")
        self.admin = User.objects.create_user(username="admin", password="StrongPass12345!")
        AccountProfile.objects.create(user=self.alice)
        AccountProfile.objects.create(user=self.bob)
        AccountProfile.objects.create(user=self.admin, role=AccountProfile.ROLE_ADMIN)

        product = Product.objects.create(name="Silk Scarf", product_code="SS-001", base_price=Decimal("15.00"))
        color = Color.objects.create(name="Blue", slug="blue")
        size = Size.objects.create(name="One Size", slug="one-size")
        self.variant = ProductVariant.objects.create(
            product=product, color=color, size=size, sku="SS-001-BLU-OS", quantity=5
        )
        self.order = Order.objects.create(
            order_number=generate_order_number(),
            customer=self.alice,
            subtotal=Decimal("30.00"),
            total_amount=Decimal("30.00"),
        )
        OrderItem.objects.create(
            order=self.order,
            product=product,
            product_variant=self.variant,
            product_name=product.name,
            color=color,
            size=size,
            quantity=2,
            unit_price=Decimal("15.00"),
            total_price=Decimal("30.00"),
        )
        self.payment = PaymentTransaction.objects.create(order=self.order, amount=Decimal("30.00"))


class GetPaymentWithOwnershipTests(PaymentTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_fixture()

    def test_owner_gets_payment_and_items(self):
        result = GetPaymentWithOwnershipUseCase.execute(
            GetPaymentWithOwnershipCommand(transaction_id=str(self.payment.id), user_id=self.alice.id)
        )
        self.assertTrue(result.success)
        self.assertEqual(result.payment.id, self.payment.id)
        self.assertEqual(result.order_number, self.order.order_number)
        self.assertEqual([item.quantity for item in result.order_items], [2])

    def test_foreign_payment_is_not_found(self):
        result = GetPaymentWithOwnershipUseCase.execute(
            GetPaymentWithOwnershipCommand(transaction_id=str(self.payment.id), user_id=self.bob.id)
        )
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Payment not found")
        self.assertIsNone(result.payment)
        self.assertEqual(result.order_items, [])

    def test_unknown_transaction_is_not_found(self):
        for transaction_id in (str(uuid.uuid4()), "not-a-uuid"):
            result = GetPaymentWithOwnershipUseCase.execute(
                GetPaymentWithOwnershipCommand(transaction_id=transaction_id, user_id=self.alice.id)
            )
            self.assertFalse(result.success)
            self.assertEqual(result.error, "Payment not found")
            self.assertIsNone(result.payment)
            self.assertIsNone(result.order_number)

    def test_storage_failure_reads_as_not_found(self):
        with patch.object(PaymentTransaction.objects, "select_related", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.payments", level="ERROR") as logs:
                result = GetPaymentWithOwnershipUseCase.execute(
                    GetPaymentWithOwnershipCommand(transaction_id=str(self.payment.id), user_id=self.alice.id)
                )
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Payment not found")
        self.assertEqual(result.error_code, "not_found")
        self.assertIsNone(result.payment)
        self.assertIn("payment_fetch_failed", logs.output[0])


class ConfirmOrderPaymentTests(PaymentTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_fixture()
        CartItem.objects.create(customer=self.alice, product_variant=self.variant, quantity=2)

    def test_confirm_marks_paid_takes_stock_and_clears_cart(self):
        result = ConfirmOrderPaymentUseCase.execute(
            ConfirmOrderPaymentCommand(transaction_id=str(self.payment.id), callback_data={"hash": "abc"})
        )
        self.assertTrue(result.success)
        self.assertFalse(result.already_completed)

        self.payment.refresh_from_db()
        self.order.refresh_from_db()
        self.variant.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentTransaction.STATUS_COMPLETED)
        self.assertIsNotNone(self.payment.completed_at)
        self.assertEqual(self.payment.callback_data, {"hash": "abc"})
        self.assertEqual(self.order.payment_status, "PAID")
        self.assertEqual(self.variant.quantity, 3)
        self.assertFalse(CartItem.objects.filter(customer=self.alice).exists())

    def test_second_confirm_changes_nothing(self):
        ConfirmOrderPaymentUseCase.execute(ConfirmOrderPaymentCommand(transaction_id=str(self.payment.id)))
        again = ConfirmOrderPaymentUseCase.execute(ConfirmOrderPaymentCommand(transaction_id=str(self.payment.id)))
        self.assertTrue(again.success)
        self.assertTrue(again.already_completed)
        self.variant.refresh_from_db()
        self.assertEqual(self.variant.quantity, 3)

    def test_unknown_transaction(self):
        result = ConfirmOrderPaymentUseCase.execute(ConfirmOrderPaymentCommand(transaction_id=str(uuid.uuid4())))
        self.assertEqual(result.error, "Transaction not found")
        self.assertEqual(result.error_code, "not_found")

    def test_storage_failure_rolls_back(self):
        with patch(
            "apps.payments.application.use_cases.confirm_order_payment.InventoryService.decrement",
            side_effect=DatabaseError("connection lost"),
        ):
            with self.assertLogs("storefront.payments", level="ERROR") as logs:
                result = ConfirmOrderPaymentUseCase.execute(
                    ConfirmOrderPaymentCommand(transaction_id=str(self.payment.id))
                )
        self.assertEqual(result.error, "Failed to confirm order")
        self.assertEqual(result.error_code, "storage_error")
        self.assertIn("payment_confirm_failed", logs.output[0])

        self.payment.refresh_from_db()
        self.order.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentTransaction.STATUS_INITIATED)
        self.assertEqual(self.order.payment_status, "PENDING")
        self.assertTrue(CartItem.objects.filter(customer=self.alice).exists())

    def test_confirm_records_coupon_use_once(self):
        promo = PromoCode.objects.create(code="WELCOME10", discount_percentage=10, max_total_uses=5)
        self.order.promo_code = promo
        self.order.save(update_fields=["promo_code"])

        ConfirmOrderPaymentUseCase.execute(ConfirmOrderPaymentCommand(transaction_id=str(self.payment.id)))
        ConfirmOrderPaymentUseCase.execute(ConfirmOrderPaymentCommand(transaction_id=str(self.payment.id)))

        usages = PromoCodeUsage.objects.filter(promo_code=promo)
        self.assertEqual(usages.count(), 1)
        self.assertEqual(usages.get().order_id, self.order.id)
        self.assertEqual(usages.get().customer_id, self.alice.id)
        promo.refresh_from_db()
        self.assertEqual(promo.total_uses, 1)
        self.assertTrue(promo.is_active)

    def test_confirm_deactivates_exhausted_coupon(self):
        promo = PromoCode.objects.create(code="LAST1", discount_percentage=20, max_total_uses=1)
        self.order.promo_code = promo
        self.order.save(update_fields=["promo_code"])

        ConfirmOrderPaymentUseCase.execute(ConfirmOrderPaymentCommand(transaction_id=str(self.payment.id)))

        promo.refresh_from_db()
        self.assertEqual(promo.total_uses, 1)
        self.assertFalse(promo.is_active)

    @override_settings(STOREFRONT_DEFAULT_CURRENCY="KHR")
    def test_currency_defaults_from_settings(self):
        payment = PaymentTransaction.objects.create(order=self.order, amount=Decimal("1.00"))
        self.assertEqual(payment.currency, "KHR")


class PaymentApiTests(PaymentTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_fixture()
        self.client = APIClient()

    def test_owner_reads_confirmation(self):
        self.client.force_authenticate(user=self.alice)
        response = self.client.get(f"/api/payments/{self.payment.id}/")
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["payment"]["order_number"], self.order.order_number)
        self.assertEqual(data["order_items"][0]["product_name"], "Silk Scarf")

    def test_foreign_reader_gets_404(self):
        self.client.force_authenticate(user=self.bob)
        response = self.client.get(f"/api/payments/{self.payment.id}/")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["message"], "Payment not found")

    def test_confirm_requires_admin(self):
        self.client.force_authenticate(user=self.alice)
        self.assertEqual(self.client.post(f"/api/payments/{self.payment.id}/confirm/").status_code, 403)

        self.client.force_authenticate(user=self.admin)
        first = self.client.post(f"/api/payments/{self.payment.id}/confirm/", data={}, format="json")
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json()["message"], "Payment confirmed successfully")
        second = self.client.post(f"/api/payments/{self.payment.id}/confirm/", data={}, format="json")
        self.assertEqual(second.json()["message"], "Payment already confirmed")

    def test_confirm_storage_failure_is_500(self):
        self.client.force_authenticate(user=self.admin)
        with patch(
            "apps.payments.application.use_cases.confirm_order_payment.InventoryService.decrement",
            side_effect=DatabaseError("connection lost"),
        ):
            with self.assertLogs("storefront.payments", level="ERROR"):
                response = self.client.post(f"/api/payments/{self.payment.id}/confirm/", data={}, format="json")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["message"], "Failed to confirm order")
