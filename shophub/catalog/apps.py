from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'shophub.catalog'

    def ready(self):
        """Import signals when app is ready"""
        import shophub.catalog.signals  # noqa: F401  # Cache invalidation signals
