import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from apps.roles.permissions import requires
from .models import SystemSettings
from .serializers import SystemSettingsSerializer

logger = logging.getLogger(__name__)


@extend_schema(
    methods=['GET'],
    responses={200: SystemSettingsSerializer},
    description="Get application settings.",
    tags=['settings'],
)
@extend_schema(
    methods=['PATCH'],
    request=SystemSettingsSerializer,
    responses={200: SystemSettingsSerializer},
    description="Update application settings (partial).",
    tags=['settings'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([requires(GET='settings.view', PATCH='settings.edit')])
def system_settings(request):
    """Get or update the settings row."""
    settings_row = SystemSettings.load()

    if request.method == 'GET':
        return Response(SystemSettingsSerializer(settings_row).data)

    serializer = SystemSettingsSerializer(settings_row, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save(updated_by=request.user)

    logger.info("System settings updated by %s: %s", request.user.username, sorted(serializer.validated_data))
    return Response(serializer.data)
