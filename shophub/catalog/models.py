import uuid
from decimal import Decimal
from django.db import models


class Category(models.Model):
    """Product categories"""
    name = models.CharField(max_length=200, db_index=True)
    slug = models.SlugField(max_length=200, unique=True)
    description = models.TextField(blank=True, null=True)
    image = models.URLField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """Sellable product"""
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_DRAFT = 'DRAFT'
    STATUS_OUT_OF_STOCK = 'OUT_OF_STOCK'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_DRAFT, 'Draft'),
        (STATUS_OUT_OF_STOCK, 'Out of stock'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, db_index=True)
    slug = models.SlugField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    # A non-null compare price marks the product as discounted
    compare_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    sku = models.CharField(max_length=100, unique=True, blank=True, null=True)
    stock = models.IntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku or 'NO-SKU'})"

    @property
    def is_discounted(self):
        return self.compare_price is not None and self.compare_price > (self.price or Decimal('0.00'))

    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['status', 'category'], name='idx_product_status_cat'),
            models.Index(fields=['price'], name='idx_product_price'),
        ]


class ProductImage(models.Model):
    """Product gallery images, first position is the cover"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='images')
    url = models.URLField(max_length=500)
    position = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.product.name} #{self.position}"

    class Meta:
        db_table = 'product_images'
        ordering = ['position', 'id']
