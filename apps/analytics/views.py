from django.http import HttpResponse, Http404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.roles.permissions import requires
from .analytics import AnalyticsQueries
from .exports import export_report, REPORT_COLUMNS
from .serializers import (
    # Input serializers
    DashboardQuerySerializer,
    DateRangeQuerySerializer,
    ClosedReportQuerySerializer,
    SalesReportQuerySerializer,
    PartySalesQuerySerializer,
    SalesTrendsQuerySerializer,
    ExportQuerySerializer,
    # Response serializers
    DashboardStatsSerializer,
    OutstandingReportSerializer,
    ClosedReportSerializer,
    SalesReportSerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError, UnknownReportError


DATE_RANGE_PARAMETERS = [
    OpenApiParameter('date_from', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)'),
    OpenApiParameter('date_to', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)'),
]


def _validated(serializer_class, request):
    query_serializer = serializer_class(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    return query_serializer.validated_data


# =============================================================================
# Dashboard
# =============================================================================

@extend_schema(
    parameters=[
        OpenApiParameter('date_range', OpenApiTypes.STR, description="'today', 'yesterday', 'week', 'month' or 'year'", default='month'),
    ],
    responses={200: DashboardStatsSerializer},
    description="Get dashboard KPIs (sales, invoices, parties, brokerage) for a relative date range.",
    tags=['dashboard'],
)
@api_view(['GET'])
@permission_classes([requires('dashboard.view')])
def dashboard_stats(request):
    """Get dashboard statistics - thin HTTP handler."""
    params = _validated(DashboardQuerySerializer, request)
    return Response(AnalyticsQueries.dashboard_stats(params['date_range']))


# =============================================================================
# Reports
# =============================================================================

@extend_schema(
    parameters=DATE_RANGE_PARAMETERS,
    responses={200: OutstandingReportSerializer, 400: ErrorSerializer},
    description="Pending invoices (by invoice date) ordered by due date, with days overdue.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([requires('reports.view')])
def outstanding_report(request):
    params = _validated(DateRangeQuerySerializer, request)
    data = AnalyticsQueries.outstanding_report(params.get('date_from'), params.get('date_to'))
    return Response(data)


@extend_schema(
    parameters=DATE_RANGE_PARAMETERS + [
        OpenApiParameter('status', OpenApiTypes.STR, description="'paid', 'cancelled' or 'all'", default='all'),
    ],
    responses={200: ClosedReportSerializer, 400: ErrorSerializer},
    description="Paid and/or cancelled invoices filtered by closing date.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([requires('reports.view')])
def closed_report(request):
    params = _validated(ClosedReportQuerySerializer, request)
    data = AnalyticsQueries.closed_report(
        params.get('date_from'),
        params.get('date_to'),
        params['status']
    )
    return Response(data)


@extend_schema(
    parameters=DATE_RANGE_PARAMETERS + [
        OpenApiParameter('group_by', OpenApiTypes.STR, description="'daily', 'weekly', 'monthly' or 'quarterly'", default='monthly'),
    ],
    responses={200: SalesReportSerializer, 400: ErrorSerializer},
    description="Sales of non-cancelled invoices grouped by period, with currency breakdown and totals.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([requires('reports.view')])
def sales_report(request):
    params = _validated(SalesReportQuerySerializer, request)
    data = AnalyticsQueries.sales_report(
        params.get('date_from'),
        params.get('date_to'),
        params['group_by']
    )
    return Response(data)


@extend_schema(
    parameters=DATE_RANGE_PARAMETERS + [
        OpenApiParameter('file_type', OpenApiTypes.STR, description="'csv', 'xlsx' or 'pdf' (printable HTML)", default='csv'),
        OpenApiParameter('status', OpenApiTypes.STR, description='Closed report status filter'),
        OpenApiParameter('group_by', OpenApiTypes.STR, description='Sales report grouping'),
    ],
    responses={(200, 'application/octet-stream'): OpenApiTypes.BINARY, 400: ErrorSerializer},
    description="Download a report as CSV, Excel or printable HTML.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([requires('reports.export')])
def export_report_file(request, report):
    """Export a report file - thin HTTP handler."""
    if report not in REPORT_COLUMNS:
        raise Http404(f"Unknown report: {report}")

    params = _validated(ExportQuerySerializer, request)

    try:
        filename, content_type, content = export_report(report, params['file_type'], params)
    except UnknownReportError:
        raise Http404(f"Unknown report: {report}")
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    response = HttpResponse(content, content_type=content_type)
    disposition = 'inline' if params['file_type'] == 'pdf' else 'attachment'
    response['Content-Disposition'] = f'{disposition}; filename="{filename}"'
    return response


# =============================================================================
# Analytics
# =============================================================================

@extend_schema(
    parameters=DATE_RANGE_PARAMETERS,
    description="Brokerage per currency, overall totals and monthly trend (default: last 12 months).",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([requires('dashboard.analytics')])
def brokerage_analytics(request):
    params = _validated(DateRangeQuerySerializer, request)
    data = AnalyticsQueries.brokerage_analytics(params.get('date_from'), params.get('date_to'))
    return Response(data)


@extend_schema(
    parameters=DATE_RANGE_PARAMETERS + [
        OpenApiParameter('limit', OpenApiTypes.INT, description='Number of parties (1-100)', default=10),
    ],
    description="Top selling parties and their contribution to total sales.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([requires('dashboard.analytics')])
def party_sales(request):
    params = _validated(PartySalesQuerySerializer, request)
    data = AnalyticsQueries.party_sales(
        params.get('date_from'),
        params.get('date_to'),
        params['limit']
    )
    return Response(data)


@extend_schema(
    parameters=DATE_RANGE_PARAMETERS + [
        OpenApiParameter('period_type', OpenApiTypes.STR, description="'weekly', 'monthly', 'quarterly' or 'yearly'", default='monthly'),
    ],
    description="Sales per period with currency breakdown and year-over-year comparison.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([requires('dashboard.analytics')])
def sales_trends(request):
    params = _validated(SalesTrendsQuerySerializer, request)
    data = AnalyticsQueries.sales_trends(
        params.get('date_from'),
        params.get('date_to'),
        params['period_type']
    )
    return Response(data)
