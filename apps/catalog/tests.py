from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from apps.catalog.models import Color, Product, ProductVariant, Size
from apps.catalog.services.inventory_service import InventoryService


class _Line:
    def __init__(self, product_variant_id, quantity):
        self.product_variant_id = product_variant_id
        self.quantity = quantity


class InventoryServiceTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        product = Product.objects.create(name="Linen Shirt", product_code="LS-001", base_price=Decimal("20.00"))
        color = Color.objects.create(name="White", slug="white", hex_code="#ffffff")
        size = Size.objects.create(name="M", slug="m", display_order=2)
        self.variant = ProductVariant.objects.create(product=product, color=color, size=size, sku="LS-001-W-M", quantity=5)

    def test_decrement_reduces_stock(self):
        InventoryService.decrement(variant_id=self.variant.id, quantity=2)
        self.variant.refresh_from_db()
        self.assertEqual(self.variant.quantity, 3)

    def test_decrement_never_goes_below_zero(self):
        InventoryService.decrement(variant_id=self.variant.id, quantity=9)
        self.variant.refresh_from_db()
        self.assertEqual(self.variant.quantity, 0)

    def test_validate_cart_stock(self):
        ok = InventoryService.validate_cart_stock([_Line(self.variant.id, 5)])
        self.assertTrue(ok.valid)

        short = InventoryService.validate_cart_stock([_Line(self.variant.id, 6)])
        self.assertFalse(short.valid)
        self.assertEqual(short.error, "Linen Shirt: only 5 available, requested 6")
        self.assertEqual(short.out_of_stock[0].sku, "LS-001-W-M")

    def test_validate_cart_stock_unknown_variant(self):
        result = InventoryService.validate_cart_stock([_Line(999999, 1)])
        self.assertFalse(result.valid)
        self.assertEqual(result.error, "Product variant not found: 999999")
