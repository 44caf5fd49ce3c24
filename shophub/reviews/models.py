from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator, MinLengthValidator
from django.db import models
from shophub.catalog.models import Product


class Review(models.Model):
    """Shopper rating and comment on a product, one per shopper and product"""
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(max_length=1000, validators=[MinLengthValidator(10)])
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'product'], name='uniq_review_user_product'),
        ]
        indexes = [
            models.Index(fields=['product', '-created_at'], name='idx_review_product_created'),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.rating}/5"
