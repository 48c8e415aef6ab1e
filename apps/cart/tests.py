from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from apps.cart.application.use_cases import add_to_cart as add_to_cart_module
from apps.cart.application.use_cases.add_to_cart import AddToCartCommand, AddToCartUseCase
from apps.cart.application.use_cases.manage_cart import (
    GetCartCommand,
    GetCartUseCase,
    RemoveFromCartCommand,
    RemoveFromCartUseCase,
    UpdateCartItemQuantityCommand,
    UpdateCartItemQuantityUseCase,
)
from apps.cart.application.use_cases.validate_cart_stock import (
    ValidateCartStockCommand,
    ValidateCartStockUseCase,
)
from apps.cart.domain.policies import MAX_QUANTITY
from apps.cart.models import CartItem
from apps.catalog.models import Color, Product, ProductVariant, Size


class CartTestMixin:
    def make_catalog(self) -> None:
        self.product = Product.objects.create(
            name="Cotton Tee",
            product_code="CT-001",
            base_price=Decimal("10.00"),
            discount_percentage=10,
        )
        self.black = Color.objects.create(name="Black", slug="black", hex_code="#000000")
        self.red = Color.objects.create(name="Red", slug="red", hex_code="#ff0000")
        self.size_m = Size.objects.create(name="M", slug="m", display_order=2)
        self.v1 = ProductVariant.objects.create(
            product=self.product, color=self.black, size=self.size_m, sku="CT-001-BLK-M", quantity=10
        )
        self.v2 = ProductVariant.objects.create(
            product=self.product, color=self.red, size=self.size_m, sku="CT-001-RED-M", quantity=1
        )


class AddToCartTests(CartTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        User = get_user_model()
        self.alice = User.objects.create_user(username="alice", password="StrongPass12345!")
        self.bob = User.objects.create_user(username="bob", password="StrongPass12345!")
        self.make_catalog()

    def test_repeated_adds_merge_into_one_line(self):
        first = AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id))
        self.assertTrue(first.success)
        self.assertTrue(first.created)
        self.assertEqual(first.cart_item.quantity, 1)

        second = AddToCartUseCase.execute(
            AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id, quantity=2)
        )
        self.assertTrue(second.success)
        self.assertFalse(second.created)
        self.assertEqual(second.cart_item.id, first.cart_item.id)
        self.assertEqual(second.cart_item.quantity, 3)
        self.assertEqual(CartItem.objects.filter(customer=self.alice, product_variant=self.v1).count(), 1)

    def test_sum_of_quantities_for_any_pair(self):
        for q1, q2 in [(1, 1), (4, 7), (12, 3)]:
            CartItem.objects.all().delete()
            AddToCartUseCase.execute(AddToCartCommand(customer_id=self.bob.id, variant_id=self.v2.id, quantity=q1))
            result = AddToCartUseCase.execute(
                AddToCartCommand(customer_id=self.bob.id, variant_id=self.v2.id, quantity=q2)
            )
            self.assertEqual(result.cart_item.quantity, q1 + q2)
            self.assertEqual(CartItem.objects.filter(customer=self.bob).count(), 1)

    def test_lines_are_separate_per_customer_and_variant(self):
        AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id))
        AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=self.v2.id))
        AddToCartUseCase.execute(AddToCartCommand(customer_id=self.bob.id, variant_id=self.v1.id))
        self.assertEqual(CartItem.objects.count(), 3)

    def test_quantity_is_not_capped_by_stock(self):
        result = AddToCartUseCase.execute(
            AddToCartCommand(customer_id=self.alice.id, variant_id=self.v2.id, quantity=50)
        )
        self.assertTrue(result.success)
        self.assertEqual(result.cart_item.quantity, 50)

    def test_rejects_non_positive_quantity(self):
        for bad in (0, -3, "abc", 1.5, True):
            result = AddToCartUseCase.execute(
                AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id, quantity=bad)
            )
            self.assertFalse(result.success)
            self.assertEqual(result.field, "quantity")
        self.assertFalse(CartItem.objects.exists())

    def test_quantity_above_column_limit_is_rejected(self):
        for bad in (MAX_QUANTITY + 1, 10**20):
            result = AddToCartUseCase.execute(
                AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id, quantity=bad)
            )
            self.assertFalse(result.success)
            self.assertEqual(result.error_code, "validation_error")
            self.assertEqual(result.field, "quantity")
        self.assertFalse(CartItem.objects.exists())

    def test_merge_past_column_limit_is_rejected(self):
        line = CartItem.objects.create(customer=self.alice, product_variant=self.v1, quantity=MAX_QUANTITY)
        result = AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id))
        self.assertFalse(result.success)
        self.assertEqual(result.field, "quantity")
        line.refresh_from_db()
        self.assertEqual(line.quantity, MAX_QUANTITY)

    def test_storage_failure_is_reported(self):
        with patch.object(add_to_cart_module, "_increment", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.cart", level="ERROR") as logs:
                result = AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id))
        self.assertEqual(result.error, "Failed to add item to cart")
        self.assertEqual(result.error_code, "storage_error")
        self.assertIn("cart_add_failed", logs.output[0])

    def test_unknown_variant_is_not_found(self):
        result = AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=999999))
        self.assertFalse(result.success)
        self.assertEqual(result.error_code, "not_found")

    def test_concurrent_insert_falls_back_to_increment(self):
        CartItem.objects.create(customer=self.alice, product_variant=self.v1, quantity=2)
        real_increment = add_to_cart_module._increment
        calls = []

        def racing_increment(**kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                return 0
            return real_increment(**kwargs)

        with patch.object(add_to_cart_module, "_increment", side_effect=racing_increment):
            result = AddToCartUseCase.execute(
                AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id, quantity=3)
            )

        self.assertTrue(result.success)
        self.assertFalse(result.created)
        self.assertEqual(result.cart_item.quantity, 5)
        self.assertEqual(len(calls), 2)
        self.assertEqual(CartItem.objects.filter(customer=self.alice).count(), 1)


class ManageCartTests(CartTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        User = get_user_model()
        self.alice = User.objects.create_user(username="alice", password="StrongPass12345!")
        self.bob = User.objects.create_user(username="bob", password="StrongPass12345!")
        self.make_catalog()
        self.item = AddToCartUseCase.execute(
            AddToCartCommand(customer_id=self.alice.id, variant_id=self.v1.id)
        ).cart_item

    def test_get_cart_newest_first(self):
        newer = AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=self.v2.id)).cart_item
        result = GetCartUseCase.execute(GetCartCommand(customer_id=self.alice.id))
        self.assertEqual([item.id for item in result.cart_items], [newer.id, self.item.id])
        self.assertEqual(GetCartUseCase.execute(GetCartCommand(customer_id=self.bob.id)).cart_items, [])

    def test_update_quantity_is_scoped(self):
        foreign = UpdateCartItemQuantityUseCase.execute(
            UpdateCartItemQuantityCommand(cart_item_id=self.item.id, customer_id=self.bob.id, quantity=5)
        )
        self.assertFalse(foreign.success)

        own = UpdateCartItemQuantityUseCase.execute(
            UpdateCartItemQuantityCommand(cart_item_id=self.item.id, customer_id=self.alice.id, quantity=5)
        )
        self.assertTrue(own.success)
        self.assertEqual(own.cart_item.quantity, 5)

    def test_remove_is_scoped(self):
        foreign = RemoveFromCartUseCase.execute(
            RemoveFromCartCommand(cart_item_id=self.item.id, customer_id=self.bob.id)
        )
        self.assertFalse(foreign.success)
        self.assertTrue(CartItem.objects.filter(id=self.item.id).exists())

        own = RemoveFromCartUseCase.execute(RemoveFromCartCommand(cart_item_id=self.item.id, customer_id=self.alice.id))
        self.assertTrue(own.success)
        self.assertFalse(CartItem.objects.filter(id=self.item.id).exists())

    def test_validate_cart_stock(self):
        self.assertTrue(ValidateCartStockUseCase.execute(ValidateCartStockCommand(customer_id=self.alice.id)).valid)

        AddToCartUseCase.execute(AddToCartCommand(customer_id=self.alice.id, variant_id=self.v2.id, quantity=3))
        result = ValidateCartStockUseCase.execute(ValidateCartStockCommand(customer_id=self.alice.id))
        self.assertFalse(result.valid)
        self.assertEqual(result.error, "Cotton Tee: only 1 available, requested 3")

    def test_empty_cart_is_not_valid_for_checkout(self):
        result = ValidateCartStockUseCase.execute(ValidateCartStockCommand(customer_id=self.bob.id))
        self.assertFalse(result.valid)
        self.assertEqual(result.error, "Cart is empty")


class CartApiTests(CartTestMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        cache.clear()
        self.alice = get_user_model().objects.create_user(username="alice", password="StrongPass12345!")
        self.make_catalog()
        self.client = APIClient()
        self.client.force_authenticate(user=self.alice)

    def test_add_merge_and_list(self):
        created = self.client.post("/api/cart/items/", data={"variant_id": self.v1.id}, format="json")
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["data"]["cart_item"]["quantity"], 1)

        merged = self.client.post("/api/cart/items/", data={"variant_id": self.v1.id, "quantity": 2}, format="json")
        self.assertEqual(merged.status_code, 200)
        self.assertEqual(merged.json()["data"]["cart_item"]["quantity"], 3)

        cart = self.client.get("/api/cart/").json()["data"]["cart_items"]
        self.assertEqual(len(cart), 1)
        self.assertEqual(cart[0]["sku"], "CT-001-BLK-M")
        self.assertEqual(cart[0]["unit_price"], "9.00")

    def test_invalid_quantity(self):
        response = self.client.post("/api/cart/items/", data={"variant_id": self.v1.id, "quantity": 0}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "quantity")

    def test_patch_and_delete(self):
        item_id = self.client.post("/api/cart/items/", data={"variant_id": self.v1.id}, format="json").json()["data"][
            "cart_item"
        ]["id"]
        patched = self.client.patch(f"/api/cart/items/{item_id}/", data={"quantity": 4}, format="json")
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["data"]["cart_item"]["quantity"], 4)

        self.assertEqual(self.client.delete(f"/api/cart/items/{item_id}/").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/cart/items/{item_id}/").status_code, 404)

    def test_stock_check(self):
        self.client.post("/api/cart/items/", data={"variant_id": self.v2.id, "quantity": 2}, format="json")
        payload = self.client.get("/api/cart/stock/").json()["data"]
        self.assertFalse(payload["valid"])
        self.assertEqual(payload["out_of_stock"][0]["requested"], 2)

    def test_oversized_quantity_is_400(self):
        response = self.client.post("/api/cart/items/", data={"variant_id": self.v1.id, "quantity": 10**20}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["field"], "quantity")
        self.assertFalse(CartItem.objects.exists())

    def test_stock_check_storage_failure_is_500(self):
        with patch.object(CartItem.objects, "filter", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("storefront.cart", level="ERROR"):
                response = self.client.get("/api/cart/stock/")
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()["success"])
        self.assertEqual(response.json()["error"]["message"], "Failed to fetch cart")
