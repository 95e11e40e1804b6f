from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.roles.permissions import requires
from .models import Activity
from .serializers import ActivitySerializer, ActivityFilterSerializer


@extend_schema(
    parameters=[
        OpenApiParameter('limit', OpenApiTypes.INT, description='Number of entries (1-100)', default=10),
        OpenApiParameter('type', OpenApiTypes.STR, description='Activity type'),
        OpenApiParameter('party', OpenApiTypes.UUID, description='Only entries for this party'),
        OpenApiParameter('invoice', OpenApiTypes.UUID, description='Only entries for this invoice'),
    ],
    responses={200: ActivitySerializer(many=True)},
    description="Most recent activity entries, newest first.",
    tags=['activities'],
)
@api_view(['GET'])
@permission_classes([requires('dashboard.view')])
def activity_feed(request):
    """Get the activity feed - thin HTTP handler."""
    filter_serializer = ActivityFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    queryset = Activity.objects.select_related('user', 'party', 'invoice')
    if 'type' in params:
        queryset = queryset.filter(type=params['type'])
    if 'party' in params:
        queryset = queryset.filter(party_id=params['party'])
    if 'invoice' in params:
        queryset = queryset.filter(invoice_id=params['invoice'])

    activities = queryset.order_by('-timestamp')[:params['limit']]
    return Response(ActivitySerializer(activities, many=True).data)
