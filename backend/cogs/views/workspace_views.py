"""
Workspace recalculation and simulation views.

POST /api/cogs/workspaces/<slug>/recalculate-recipes/
POST /api/cogs/workspaces/<slug>/recalculate-products/
POST /api/cogs/workspaces/<slug>/recalculate-variations/
POST /api/cogs/workspaces/<slug>/simulate/
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from tenant.managers import set_current_tenant
from tenant.models import Tenant
from cogs.permissions import CanManageWorkspaceCosts
from cogs.serializers import RecalculationResultSerializer, SimulatePriceChangeSerializer
from cogs.services import CascadeOrchestrator, SimulationService

logger = logging.getLogger(__name__)


class WorkspaceMixin:
    """
    Resolves the workspace from the `slug` URL kwarg before permission checks.

    Unknown or inactive workspaces answer 404. The tenant context is set for
    the duration of the request so tenant-scoped managers work.
    """
    tenant = None

    def initial(self, request, *args, **kwargs):
        self.tenant = get_object_or_404(Tenant, slug=kwargs.get('slug'), is_active=True)
        set_current_tenant(self.tenant)
        super().initial(request, *args, **kwargs)

    def finalize_response(self, request, response, *args, **kwargs):
        set_current_tenant(None)
        return super().finalize_response(request, response, *args, **kwargs)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['tenant'] = self.tenant
        return context


class BaseRecalculationView(WorkspaceMixin, APIView):
    """Runs one bulk operation of the cascade orchestrator and returns its summary."""
    permission_classes = [IsAuthenticated, CanManageWorkspaceCosts]
    operation = None

    def post(self, request, slug):
        try:
            orchestrator = CascadeOrchestrator(self.tenant)
            result = getattr(orchestrator, self.operation)()
        except Exception as e:
            logger.error(f"{self.operation} failed for workspace {slug}: {e}", exc_info=True)
            return Response(
                {'error': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response(RecalculationResultSerializer(result).data)


class RecalculateRecipeCostsView(BaseRecalculationView):
    operation = 'recalculate_all_recipe_costs'


class RecalculateProductCostsView(BaseRecalculationView):
    operation = 'recalculate_all_product_costs'


class RecalculateVariationsView(BaseRecalculationView):
    operation = 'recalculate_all_variations'


class SimulatePriceChangeView(WorkspaceMixin, APIView):
    """
    Preview the effect of a new ingredient cost without saving anything.

    POST /api/cogs/workspaces/<slug>/simulate/
    Body: {"ingredient_id": 1, "new_unit_cost": "0.000006"}
    """
    permission_classes = [IsAuthenticated, CanManageWorkspaceCosts]

    def post(self, request, slug):
        serializer = SimulatePriceChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = SimulationService(self.tenant).simulate_price_change(
                data['ingredient_id'], data['new_unit_cost']
            )
        except Exception as e:
            logger.error(f"Simulation failed for workspace {slug}: {e}", exc_info=True)
            return Response(
                {'error': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response(result)
