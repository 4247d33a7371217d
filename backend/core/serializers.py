from rest_framework import serializers


class StrictCharField(serializers.CharField):
    """CharField that only accepts JSON strings (no numbers or booleans)"""
    default_error_messages = {
        'invalid': 'Must be a string.',
    }

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail('invalid')
        return super().to_internal_value(data)
