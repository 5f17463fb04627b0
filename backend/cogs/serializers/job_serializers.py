"""
Serializers for recalculation, simulation and menu pricing requests.
"""
from rest_framework import serializers


class RecalculationErrorSerializer(serializers.Serializer):
    entity_type = serializers.CharField()
    entity_id = serializers.IntegerField()
    reason = serializers.CharField()


class RecalculationResultSerializer(serializers.Serializer):
    """Summary of a bulk recalculation job."""
    job_id = serializers.CharField()
    status = serializers.CharField()
    updated = serializers.IntegerField()
    failed = serializers.IntegerField()
    changed = serializers.IntegerField()
    errors = RecalculationErrorSerializer(many=True)
    downstream = serializers.DictField(child=serializers.DictField(child=serializers.IntegerField()))


class SimulatePriceChangeSerializer(serializers.Serializer):
    """Input of a price change simulation."""
    ingredient_id = serializers.IntegerField(help_text="Ingredient whose cost changes")
    new_unit_cost = serializers.DecimalField(
        max_digits=24,
        decimal_places=12,
        help_text="New cost per base unit (e.g., per gram)"
    )

    def validate_new_unit_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Cost cannot be negative")
        return value


class TargetMarginSerializer(serializers.Serializer):
    """
    Input of a menu target margin change.

    update_existing defaults to True here because this is the interactive
    edit flow; programmatic callers pass it explicitly to PricingService.
    """
    target_margin = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0)
    update_existing = serializers.BooleanField(default=True)
