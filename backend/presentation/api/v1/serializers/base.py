"""
Base Serializers.

Shared fields and minimal nested representations.
"""

from decimal import Decimal

from rest_framework import serializers


class AmountField(serializers.Field):
    """
    Decimal quantity rendered as a plain string without trailing zeros.

    Precision follows the recipe rows; nothing is rounded.
    """

    def to_representation(self, value):
        if value is None:
            return None
        normalized = Decimal(value).normalize()
        return format(normalized, 'f')


class IssuesField(serializers.ListField):
    """Issues reported by the engine for skipped or zeroed units."""

    def __init__(self, **kwargs):
        kwargs.setdefault('read_only', True)
        super().__init__(child=serializers.DictField(), **kwargs)


class LookupSerializer(serializers.Serializer):
    """Minimal lookup serializer for nested representations."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    code = serializers.CharField(allow_null=True, required=False)


class ProductSummarySerializer(serializers.Serializer):
    """Lightweight product row of a result page."""

    id = serializers.IntegerField()
    code = serializers.CharField(allow_null=True)
    name = serializers.CharField()
