"""
Persistence gateway for the catalog.

``CatalogStore`` is created once per process (see ``CatalogConfig.ready``) and
handed to the resource handlers. Each write runs in its own atomic block, and
every database failure comes back as a ``StoreError`` with a closed set of
kinds instead of a driver-specific exception.
"""
import logging
from contextlib import contextmanager

from django.core.exceptions import ObjectDoesNotExist
from django.db import DEFAULT_DB_ALIAS, DatabaseError, IntegrityError, connections, transaction
from django.db.models import ProtectedError, RestrictedError

from backend.core.exceptions import StoreError, StoreErrorKind
from .models import Category, Product

logger = logging.getLogger('backend.catalog')

# SQLSTATE codes (PostgreSQL and other drivers that expose them)
UNIQUE_VIOLATION_SQLSTATE = '23505'
FOREIGN_KEY_VIOLATION_SQLSTATE = '23503'


def classify_integrity_error(exc):
    """Work out which constraint an IntegrityError comes from"""
    cause = exc.__cause__
    code = getattr(cause, 'sqlstate', None) or getattr(cause, 'pgcode', None)
    if code == UNIQUE_VIOLATION_SQLSTATE:
        return StoreErrorKind.UNIQUE_VIOLATION
    if code == FOREIGN_KEY_VIOLATION_SQLSTATE:
        return StoreErrorKind.FOREIGN_KEY_VIOLATION

    # SQLite and MySQL only report the constraint in the message
    message = str(exc).lower()
    if 'unique constraint' in message or 'duplicate' in message:
        return StoreErrorKind.UNIQUE_VIOLATION
    if 'foreign key' in message:
        return StoreErrorKind.FOREIGN_KEY_VIOLATION
    return StoreErrorKind.OTHER


class EntityGateway:
    """
    Single-entity access used by the generic resource handler.

    ``references`` maps a foreign key attribute (e.g. ``category_id``) to the
    model it must point at; writes check it inside the same transaction.
    """

    def __init__(self, store, model, ordering=('name',), select_related=(), detail_prefetch=(),
                 references=None):
        self.store = store
        self.model = model
        self.ordering = ordering
        self.select_related = select_related
        self.detail_prefetch = detail_prefetch
        self.references = references or {}

    @property
    def entity(self):
        return self.model.__name__

    def queryset(self):
        qs = self.model.objects.using(self.store.alias)
        if self.select_related:
            qs = qs.select_related(*self.select_related)
        return qs.order_by(*self.ordering)

    def list(self):
        with self.store.translate_errors(self.entity):
            return list(self.queryset())

    def get(self, pk):
        with self.store.translate_errors(self.entity):
            qs = self.queryset()
            if self.detail_prefetch:
                qs = qs.prefetch_related(*self.detail_prefetch)
            return qs.get(pk=pk)

    def create(self, **fields):
        with self.store.translate_errors(self.entity), transaction.atomic(using=self.store.alias):
            self.check_references(fields)
            return self.model.objects.using(self.store.alias).create(**fields)

    def update(self, pk, **fields):
        with self.store.translate_errors(self.entity), transaction.atomic(using=self.store.alias):
            instance = self.model.objects.using(self.store.alias).select_for_update().get(pk=pk)
            self.check_references(fields)
            for attr, value in fields.items():
                setattr(instance, attr, value)
            instance.save(using=self.store.alias)
            return instance

    def delete(self, pk):
        with self.store.translate_errors(self.entity), transaction.atomic(using=self.store.alias):
            instance = self.model.objects.using(self.store.alias).select_for_update().get(pk=pk)
            instance.delete(using=self.store.alias)
            return instance

    def check_references(self, fields):
        for attr, target in self.references.items():
            if attr not in fields:
                continue
            value = fields[attr]
            if not target.objects.using(self.store.alias).filter(pk=value).exists():
                raise StoreError(
                    StoreErrorKind.FOREIGN_KEY_VIOLATION,
                    f"{target.__name__} {value} does not exist",
                    entity=self.entity,
                )


class CatalogStore:
    """Handle on the catalog database, opened at startup and closed at shutdown"""

    def __init__(self, alias=DEFAULT_DB_ALIAS):
        self.alias = alias
        self.is_open = False
        self.categories = EntityGateway(self, Category, detail_prefetch=('products',))
        self.products = EntityGateway(
            self, Product,
            select_related=('category',),
            references={'category_id': Category},
        )

    def __repr__(self):
        state = 'open' if self.is_open else 'closed'
        return f"<CatalogStore alias={self.alias!r} {state}>"

    def open(self):
        # Raises ConnectionDoesNotExist for an alias missing from DATABASES
        connections[self.alias]
        self.is_open = True
        logger.info(f"Catalog store opened on database '{self.alias}'")
        return self

    def close(self):
        if not self.is_open:
            return
        self.is_open = False
        connections[self.alias].close()
        logger.info(f"Catalog store on database '{self.alias}' closed")

    @contextmanager
    def translate_errors(self, entity):
        if not self.is_open:
            raise StoreError(StoreErrorKind.OTHER, 'catalog store is closed', entity=entity)
        try:
            yield
        except StoreError:
            raise
        except ObjectDoesNotExist as e:
            raise StoreError(StoreErrorKind.NOT_FOUND, str(e), entity=entity) from e
        except (ProtectedError, RestrictedError) as e:
            raise StoreError(StoreErrorKind.FOREIGN_KEY_VIOLATION, str(e), entity=entity) from e
        except IntegrityError as e:
            raise StoreError(classify_integrity_error(e), str(e), entity=entity) from e
        except DatabaseError as e:
            raise StoreError(StoreErrorKind.OTHER, str(e), entity=entity) from e
