import atexit

from django.apps import AppConfig
from django.db import DEFAULT_DB_ALIAS


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.catalog'
    store = None

    def ready(self):
        """Open the catalog store for the lifetime of the process"""
        from django.conf import settings
        from .store import CatalogStore

        if self.store is None:
            alias = getattr(settings, 'CATALOG_DATABASE_ALIAS', DEFAULT_DB_ALIAS)
            self.store = CatalogStore(alias=alias).open()
            atexit.register(self.store.close)
