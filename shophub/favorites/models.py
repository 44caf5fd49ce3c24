from django.conf import settings
from django.db import models
from shophub.catalog.models import Product


class Favorite(models.Model):
    """Product saved to a shopper's wishlist"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='favorites')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='favorited_by')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'favorites'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'product'], name='uniq_favorite_user_product'),
        ]

    def __str__(self):
        return f"{self.user} - {self.product.name}"
