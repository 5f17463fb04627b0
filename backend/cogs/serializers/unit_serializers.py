"""
Unit serializers.
"""
from rest_framework import serializers

from measurements.models import Unit


class UnitSerializer(serializers.ModelSerializer):
    """
    Serializer for workspace units.

    Base units are created by seeding and are read-only; the view rejects
    edits to them.
    """

    class Meta:
        model = Unit
        fields = ['id', 'code', 'name', 'measurement_type', 'is_base', 'conversion_factor']
        read_only_fields = ['id', 'is_base']

    def validate_conversion_factor(self, value):
        if value <= 0:
            raise serializers.ValidationError("Conversion factor must be positive.")
        return value

    def validate_code(self, value):
        tenant = self.context['tenant']
        queryset = Unit.all_objects.filter(tenant=tenant, code=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError(f"Unit '{value}' already exists in this workspace.")
        return value
