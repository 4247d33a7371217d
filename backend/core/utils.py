"""Helpers shared by the resource handlers"""
from .exceptions import ResourceNotFound, ValidationFailed

# Largest value a BigAutoField primary key can hold
MAX_ID = 9223372036854775807


def parse_pk(raw, invalid_message='Invalid id.', not_found_message='Not found.'):
    """
    Parse a primary key taken from the URL.

    Non-integer values are a validation error. Integers that no row could ever
    have (zero, negative, or larger than the id column) are reported as not
    found without touching the database.
    """
    if isinstance(raw, bool):
        raise ValidationFailed(invalid_message)
    try:
        pk = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationFailed(invalid_message)
    if pk < 1 or pk > MAX_ID:
        raise ResourceNotFound(not_found_message)
    return pk
