from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from apps.accounts.models import AccountProfile
from apps.catalog.models import Color, Product, ProductVariant, Size
from apps.orders.application.use_cases.get_order_details import GetOrderDetailsCommand, GetOrderDetailsUseCase
from apps.orders.application.use_cases.list_customer_orders import (
    ListCustomerOrdersCommand,
    ListCustomerOrdersUseCase,
)
from apps.orders.application.use_cases.update_order_status import (
    UpdateOrderStatusCommand,
    UpdateOrderStatusUseCase,
)
from apps.orders.domain.errors import InvalidOrderStatusError, OrderStatusTransitionError
from apps.orders.domain.status import (
    can_transition,
    ensure_transition,
    generate_order_number,
    is_valid_status,
    parse_status,
    status_change_note,
)
from apps.orders.models import Order, OrderItem
from apps.payments.models import PaymentTransaction


class OrderStatusDomainTests(TestCase):
    def test_known_statuses(self):
        self.assertTrue(is_valid_status("SHIPPED"))
        self.assertFalse(is_valid_status("shipped"))
        self.assertFalse(is_valid_status("RETURNED"))

    def test_transitions(self):
        self.assertTrue(can_transition("PENDING", "CONFIRMED"))
        self.assertTrue(can_transition("CONFIRMED", "SHIPPED"))
        self.assertTrue(can_transition("SHIPPED", "DELIVERED"))
        self.assertFalse(can_transition("DELIVERED", "PENDING"))
        self.assertFalse(can_transition("CANCELLED", "CONFIRMED"))
        self.assertFalse(can_transition("PENDING", "UNKNOWN"))

    def test_parse_status_normalizes(self):
        self.assertEqual(parse_status(" shipped "), "SHIPPED")
        with self.assertRaises(InvalidOrderStatusError):
            parse_status("RETURNED")

    def test_ensure_transition(self):
        ensure_transition("PENDING", parse_status("CONFIRMED"))
        with self.assertRaisesMessage(OrderStatusTransitionError, "Order is already SHIPPED"):
            ensure_transition("SHIPPED", parse_status("SHIPPED"))

    def test_status_notes(self):
        self.assertEqual(status_change_note("CONFIRMED", "SHIPPED"), "Your Item has been picked up by courier partner.")
        self.assertEqual(status_change_note("PENDING", "SHIPPED"), "Status changed from PENDING to SHIPPED")

    def test_order_number_format(self):
        number = generate_order_number()
        prefix, timestamp, suffix = number.split("-")
        self.assertEqual(prefix, "ORD")
        self.assertEqual(len(timestamp), 8)
        self.assertTrue(timestamp.isdigit())
        self.assertEqual(len(suffix), 6)
        self.assertTrue(suffix.isalnum() and suffix.upper() == suffix)


class OrderTestMixin:
    def make_users(self) -> None:
        User = get_user_model()
        self.alice = User.objects.create_user(username="alice", password="StrongPass12345!", email="alice@example.com")
        self.bob = User.objects.create_user(username="bob", password="StrongPass12345!")
        self.admin = User.objects.create_user(username="admin", password="StrongPass12345!")
        AccountProfile.objects.create(user=self.alice, first_name="Alice", last_name="Chan", phone="012345678")
        AccountProfile.objects.create(user=self.bob)
        AccountProfile.objects.create(user=self.admin, role=AccountProfile.ROLE_ADMIN)

    def make_order(self, customer, *, quantity: int = 2) -> Order:
        product = Product.objects.get_or_create(
            product_code="CT-001",
            defaults={"name": "Cotton Tee", "base_price": Decimal("10.00")},
        )[0]
        color = Color.objects.get_or_create(slug="black", defaults={"name": "Black"})[0]
        size = Size.objects.get_or_create(slug="m", defaults={"name": "M"})[0]
        variant = ProductVariant.objects.get_or_create(
            product=product, color=color, size=size, defaults={"sku": "CT-001-BLK-M", "quantity": 5}
        )[0]
        order = Order.objects.create(
            order_number=generate_order_number(),
            customer=customer,
            subtotal=Decimal("20.00"),
            total_amount=Decimal("20.00"),
        )
        OrderItem.objects.create(
            order=order,
            product=product,
            product_variant=variant,
            product_name=product.name,
            color=color,
            size=size,
            quantity=quantity,
            unit_price=Decimal("10.00"),
            total_price=Decimal("10.00") * quantity,
        )
        return order


class OrderDetailsTests(OrderTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_users()
        self.order = self.make_order(self.alice)

    def test_owner_sees_order(self):
        result = GetOrderDetailsUseCase.execute(GetOrderDetailsCommand(order_ref=str(self.order.id), user_id=self.alice.id))
        self.assertTrue(result.success)
        self.assertEqual(result.order.id, self.order.id)
        self.assertEqual(result.role, AccountProfile.ROLE_CUSTOMER)
        self.assertEqual(len(result.items), 1)
        self.assertIsNone(result.customer)

    def test_lookup_by_order_number(self):
        result = GetOrderDetailsUseCase.execute(
            GetOrderDetailsCommand(order_ref=self.order.order_number, user_id=self.alice.id)
        )
        self.assertTrue(result.success)
        self.assertEqual(result.order.id, self.order.id)

    def test_foreign_order_reads_as_missing(self):
        result = GetOrderDetailsUseCase.execute(GetOrderDetailsCommand(order_ref=str(self.order.id), user_id=self.bob.id))
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Order not found or you don't have access")
        self.assertEqual(result.error_code, "not_found")

    def test_admin_gets_customer_and_payments(self):
        PaymentTransaction.objects.create(order=self.order, amount=Decimal("20.00"))
        result = GetOrderDetailsUseCase.execute(GetOrderDetailsCommand(order_ref=str(self.order.id), user_id=self.admin.id))
        self.assertTrue(result.success)
        self.assertEqual(result.customer["name"], "Alice Chan")
        self.assertEqual(result.customer["email"], "alice@example.com")
        self.assertEqual(len(result.payment_transactions), 1)

    def test_admin_missing_order(self):
        result = GetOrderDetailsUseCase.execute(GetOrderDetailsCommand(order_ref="ORD-0-NOPE", user_id=self.admin.id))
        self.assertEqual(result.error, "Order not found")

    def test_user_without_profile_is_forbidden(self):
        stranger = get_user_model().objects.create_user(username="stranger", password="StrongPass12345!")
        result = GetOrderDetailsUseCase.execute(GetOrderDetailsCommand(order_ref=str(self.order.id), user_id=stranger.id))
        self.assertFalse(result.success)
        self.assertEqual(result.error_code, "forbidden")


class ListCustomerOrdersTests(OrderTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_users()
        for _ in range(12):
            self.make_order(self.alice, quantity=3)
        self.make_order(self.bob)

    def test_first_page(self):
        result = ListCustomerOrdersUseCase.execute(ListCustomerOrdersCommand(user_id=self.alice.id))
        self.assertTrue(result.success)
        self.assertEqual(len(result.orders), 10)
        self.assertEqual(result.pagination.count, 12)
        self.assertEqual(result.pagination.total_pages, 2)
        self.assertTrue(result.pagination.has_next_page)
        self.assertFalse(result.pagination.has_previous_page)
        self.assertEqual(result.orders[0].item_count, 1)
        self.assertEqual(result.orders[0].total_quantity, 3)

    def test_last_page(self):
        result = ListCustomerOrdersUseCase.execute(ListCustomerOrdersCommand(user_id=self.alice.id, page=2))
        self.assertEqual(len(result.orders), 2)
        self.assertFalse(result.pagination.has_next_page)
        self.assertTrue(result.pagination.has_previous_page)

    def test_invalid_page(self):
        result = ListCustomerOrdersUseCase.execute(ListCustomerOrdersCommand(user_id=self.alice.id, page=0))
        self.assertEqual(result.error_code, "validation_error")

    def test_storage_failure(self):
        with patch.object(Order.objects, "filter", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.orders", level="ERROR") as logs:
                result = ListCustomerOrdersUseCase.execute(ListCustomerOrdersCommand(user_id=self.alice.id))
        self.assertEqual(result.error, "Failed to fetch orders")
        self.assertEqual(result.error_code, "storage_error")
        self.assertIn("order_list_failed", logs.output[0])

    @override_settings(STOREFRONT_DEFAULT_CURRENCY="KHR")
    def test_currency_defaults_from_settings(self):
        self.assertEqual(self.make_order(self.alice).currency, "KHR")


class UpdateOrderStatusTests(OrderTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_users()
        self.order = self.make_order(self.alice)

    def _update(self, status: str, **kwargs):
        return UpdateOrderStatusUseCase.execute(
            UpdateOrderStatusCommand(order_id=str(self.order.id), new_status=status, admin_id=self.admin.id, **kwargs)
        )

    def test_forward_transition_writes_history(self):
        result = self._update("CONFIRMED")
        self.assertTrue(result.success)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "CONFIRMED")
        self.assertEqual(result.history.notes, "Seller has confirmed your order.")
        self.assertEqual(result.history.changed_by_id, self.admin.id)

    def test_custom_note(self):
        result = self._update("CANCELLED", notes="Customer asked to cancel")
        self.assertEqual(result.history.notes, "Customer asked to cancel")

    def test_same_status_conflicts(self):
        result = self._update("PENDING")
        self.assertEqual(result.error, "Order is already PENDING")
        self.assertEqual(result.error_code, "conflict")

    def test_illegal_transition(self):
        result = self._update("DELIVERED")
        self.assertEqual(result.error, "Cannot change order status from PENDING to DELIVERED")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "PENDING")
        self.assertFalse(self.order.status_history.exists())

    def test_unknown_status(self):
        result = self._update("RETURNED")
        self.assertEqual(result.error, "Invalid order status")
        self.assertEqual(result.field, "status")


class OrderApiTests(OrderTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_users()
        self.order = self.make_order(self.alice)
        self.client = APIClient()

    def test_list_and_detail(self):
        self.client.force_authenticate(user=self.alice)
        listing = self.client.get("/api/orders/")
        self.assertEqual(listing.status_code, 200)
        payload = listing.json()["data"]
        self.assertEqual(payload["pagination"]["count"], 1)
        self.assertEqual(payload["orders"][0]["order_number"], self.order.order_number)

        detail = self.client.get(f"/api/orders/{self.order.order_number}/")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.json()["data"]["order"]["items"][0]["product_name"], "Cotton Tee")

    def test_foreign_detail_is_404(self):
        self.client.force_authenticate(user=self.bob)
        response = self.client.get(f"/api/orders/{self.order.id}/")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()["success"])

    def test_status_update_requires_admin(self):
        self.client.force_authenticate(user=self.alice)
        response = self.client.post(f"/api/orders/{self.order.id}/status/", data={"status": "CONFIRMED"}, format="json")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post(f"/api/orders/{self.order.id}/status/", data={"status": "CONFIRMED"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["order"]["status"], "CONFIRMED")

    def test_illegal_status_update_is_409(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(f"/api/orders/{self.order.id}/status/", data={"status": "SHIPPED"}, format="json")
        self.assertEqual(response.status_code, 409)

    def test_list_storage_failure_is_500(self):
        self.client.force_authenticate(user=self.alice)
        with patch.object(Order.objects, "filter", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.orders", level="ERROR"):
                response = self.client.get("/api/orders/")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["message"], "Failed to fetch orders")
