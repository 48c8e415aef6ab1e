from django.db import models


class Color(models.Model):
    name = models.CharField(max_length=50)
    slug = models.SlugField(max_length=60, unique=True)
    hex_code = models.CharField(max_length=7, blank=True, default="")

    def __str__(self) -> str:
        return self.name


class Size(models.Model):
    name = models.CharField(max_length=20)
    slug = models.SlugField(max_length=30, unique=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "id"]

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    name = models.CharField(max_length=255)
    product_code = models.CharField(max_length=64, unique=True)
    base_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount_percentage = models.PositiveSmallIntegerField(default=0)
    banner_image_url = models.URLField(max_length=500, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.product_code})"


class ProductVariant(models.Model):
    """A purchasable color/size SKU of a product."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variants")
    color = models.ForeignKey(Color, on_delete=models.PROTECT, related_name="variants")
    size = models.ForeignKey(Size, on_delete=models.PROTECT, related_name="variants")
    sku = models.CharField(max_length=64, unique=True)
    quantity = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["product", "color", "size"], name="uq_variant_product_color_size"),
        ]

    def __str__(self) -> str:
        return f"{self.product.name} / {self.color} / {self.size}"
