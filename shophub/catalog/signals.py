"""
Cache invalidation signals
Catalog listings are dropped from the cache whenever catalog data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from shophub.core.cache_utils import invalidate_catalog_cache
from .models import Category, Product, ProductImage

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=Category)
@receiver([post_save, post_delete], sender=Product)
@receiver([post_save, post_delete], sender=ProductImage)
def invalidate_catalog_on_change(sender, instance, **kwargs):
    logger.debug(f"{sender.__name__} {instance.pk} changed, invalidating catalog cache")
    invalidate_catalog_cache()
