"""
Generic CRUD handler used by every resource endpoint.

A handler is configured with the store gateway for one entity, the serializer
that validates incoming bodies, the serializers that render results, and the
user-facing messages for each failure. Every operation validates its input
first and then makes exactly one gateway call.
"""
import logging

from .exceptions import (
    InternalError, ResourceConflict, ResourceNotFound, StoreError, StoreErrorKind, ValidationFailed,
    error_message,
)
from .utils import parse_pk

logger = logging.getLogger('backend.core.handlers')

DEFAULT_MESSAGES = {
    'invalid_id': 'Invalid id.',
    'not_found': 'Not found.',
    'duplicate': 'A record with these values already exists.',
    'bad_reference': 'A referenced record does not exist.',
    'in_use': 'This record is still referenced by other records.',
    'deleted': 'Deleted successfully.',
    'internal': 'Internal server error.',
}


class ResourceHandler:
    """List, retrieve, create, update and delete one entity through a store gateway"""

    def __init__(self, name, gateway, input_serializer, output_serializer,
                 detail_serializer=None, messages=None):
        self.name = name
        self.gateway = gateway
        self.input_serializer = input_serializer
        self.output_serializer = output_serializer
        self.detail_serializer = detail_serializer or output_serializer
        self.messages = {**DEFAULT_MESSAGES, **(messages or {})}

    def __repr__(self):
        return f"<ResourceHandler {self.name}>"

    def list(self):
        try:
            objects = self.gateway.list()
        except StoreError as e:
            self.raise_for(e, 'list')
        return self.output_serializer(objects, many=True).data

    def retrieve(self, raw_pk):
        pk = self.parse_pk(raw_pk)
        try:
            obj = self.gateway.get(pk)
        except StoreError as e:
            self.raise_for(e, 'retrieve', pk)
        return self.detail_serializer(obj).data

    def create(self, data):
        fields = self.validate(data)
        try:
            obj = self.gateway.create(**fields)
        except StoreError as e:
            self.raise_for(e, 'create')
        logger.info(f"Created {self.name} {obj.pk}")
        return self.output_serializer(obj).data

    def update(self, raw_pk, data):
        pk = self.parse_pk(raw_pk)
        fields = self.validate(data)
        try:
            obj = self.gateway.update(pk, **fields)
        except StoreError as e:
            self.raise_for(e, 'update', pk)
        logger.info(f"Updated {self.name} {pk}")
        return self.output_serializer(obj).data

    def destroy(self, raw_pk):
        pk = self.parse_pk(raw_pk)
        try:
            self.gateway.delete(pk)
        except StoreError as e:
            self.raise_for(e, 'delete', pk)
        logger.info(f"Deleted {self.name} {pk}")
        return {'message': self.messages['deleted']}

    def parse_pk(self, raw_pk):
        return parse_pk(
            raw_pk,
            invalid_message=self.messages['invalid_id'],
            not_found_message=self.messages['not_found'],
        )

    def validate(self, data):
        serializer = self.input_serializer(data=data)
        if not serializer.is_valid():
            message = error_message(serializer.errors)
            logger.warning(f"{self.name} validation failed: {message}")
            raise ValidationFailed(message)
        return dict(serializer.validated_data)

    def raise_for(self, error, operation, pk=None):
        """Translate a store error into the API error for this operation"""
        kind = error.kind
        if kind is StoreErrorKind.NOT_FOUND:
            raise ResourceNotFound(self.messages['not_found'])
        if kind is StoreErrorKind.UNIQUE_VIOLATION:
            logger.warning(f"{self.name} {operation} rejected, duplicate: {error.detail}")
            raise ResourceConflict(self.messages['duplicate'])
        if kind is StoreErrorKind.FOREIGN_KEY_VIOLATION:
            if operation == 'delete':
                logger.warning(f"{self.name} {pk} is still referenced, delete refused")
                raise ResourceConflict(self.messages['in_use'])
            logger.warning(f"{self.name} {operation} rejected, bad reference: {error.detail}")
            raise ValidationFailed(self.messages['bad_reference'])
        logger.error(f"Store error during {self.name} {operation}: {error!r}", exc_info=error)
        raise InternalError(self.messages['internal'])
