"""
Unit views.
"""
from django.db.models.deletion import ProtectedError
from django_filters import rest_framework as filters
from rest_framework import viewsets, status
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from measurements.models import Unit, MeasurementType, BaseUnitImmutableError
from cogs.serializers import UnitSerializer
from cogs.permissions import CanManageWorkspaceCosts
from cogs.services import CascadeOrchestrator
from .workspace_views import WorkspaceMixin


class UnitFilter(filters.FilterSet):
    """Filter for Unit."""
    measurement_type = filters.ChoiceFilter(choices=MeasurementType.choices)
    is_base = filters.BooleanFilter()

    class Meta:
        model = Unit
        fields = ['measurement_type', 'is_base']


class UnitViewSet(WorkspaceMixin, viewsets.ModelViewSet):
    """
    ViewSet for managing the units of a workspace.

    list: Get all units, optionally filtered by measurement_type.
    retrieve: Get a specific unit.
    create: Add a non-base unit with its conversion factor.
    update: Update a non-base unit.
    destroy: Delete a non-base unit that nothing uses.

    Base units are immutable; attempts to change or delete them answer 400.
    """
    permission_classes = [IsAuthenticated, CanManageWorkspaceCosts]
    serializer_class = UnitSerializer
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = UnitFilter

    def get_queryset(self):
        # Unit.objects is tenant-scoped via TenantManager
        return Unit.objects.all().order_by('measurement_type', 'conversion_factor', 'code')

    def perform_create(self, serializer):
        serializer.save(tenant=self.tenant, is_base=False)

    def perform_update(self, serializer):
        previous_factor = serializer.instance.conversion_factor
        unit = serializer.save()
        if unit.conversion_factor != previous_factor:
            # Every cost measured in this unit moves
            CascadeOrchestrator(self.tenant).recalculate_all_ingredient_costs()

    def update(self, request, *args, **kwargs):
        try:
            return super().update(request, *args, **kwargs)
        except BaseUnitImmutableError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    def destroy(self, request, *args, **kwargs):
        try:
            return super().destroy(request, *args, **kwargs)
        except BaseUnitImmutableError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except ProtectedError:
            return Response(
                {'error': 'Unit is in use and cannot be deleted.'},
                status=status.HTTP_400_BAD_REQUEST
            )
