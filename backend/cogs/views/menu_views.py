"""
Menu pricing views.
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from menus.models import Menu
from cogs.exceptions import COGSError
from cogs.permissions import CanManageWorkspaceCosts
from cogs.serializers import TargetMarginSerializer
from cogs.services import PricingService
from .workspace_views import WorkspaceMixin

logger = logging.getLogger(__name__)


class MenuTargetMarginView(WorkspaceMixin, APIView):
    """
    Change a menu's target margin.

    PATCH /api/cogs/workspaces/<slug>/menus/<id>/target-margin/
    Body: {"target_margin": "35", "update_existing": true}

    With update_existing false only entries added later use the new target.
    Manual override prices are kept either way.
    """
    permission_classes = [IsAuthenticated, CanManageWorkspaceCosts]

    def patch(self, request, slug, pk):
        menu = get_object_or_404(Menu.all_objects, pk=pk, tenant=self.tenant)

        serializer = TargetMarginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = PricingService(self.tenant).update_target_margin(
                menu,
                data['target_margin'],
                update_existing=data['update_existing'],
            )
        except COGSError as e:
            return Response(
                {'error': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response({
            'menu': menu.pk,
            'target_margin': str(menu.target_margin),
            'update_existing': data['update_existing'],
            **result.as_dict(),
        })
