"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    DashboardQuerySerializer - Named date range for dashboard stats
    DateRangeQuerySerializer - date_from / date_to pair
    ClosedReportQuerySerializer - Date range plus status filter
    SalesReportQuerySerializer - Date range plus grouping
    PartySalesQuerySerializer - Date range plus result limit
    SalesTrendsQuerySerializer - Date range plus period type
    ExportQuerySerializer - Report parameters plus file type

Response Serializers:
    DashboardStatsSerializer - Dashboard KPIs
    OutstandingReportSerializer - Pending invoices with totals
    ClosedReportSerializer - Closed invoices with totals
    SalesReportSerializer - Sales periods with totals
"""

from rest_framework import serializers

from .analytics import DATE_RANGES, SALES_GROUPINGS, TREND_PERIODS, CLOSED_STATUSES
from .exports import FILE_TYPES


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class DashboardQuerySerializer(serializers.Serializer):
    """
    Validate dashboard query parameters.

    Query Parameters:
        date_range (str): today | yesterday | week | month | year
    """

    date_range = serializers.ChoiceField(choices=DATE_RANGES, default='month')


class DateRangeQuerySerializer(serializers.Serializer):
    """
    Validate an optional inclusive date range.

    Query Parameters:
        date_from (date): Start of range (YYYY-MM-DD)
        date_to (date): End of range (YYYY-MM-DD)
    """

    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be on or after start date'
            })

        return attrs


class ClosedReportQuerySerializer(DateRangeQuerySerializer):
    status = serializers.ChoiceField(choices=CLOSED_STATUSES, default='all')


class SalesReportQuerySerializer(DateRangeQuerySerializer):
    group_by = serializers.ChoiceField(choices=SALES_GROUPINGS, default='monthly')


class PartySalesQuerySerializer(DateRangeQuerySerializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)


class SalesTrendsQuerySerializer(DateRangeQuerySerializer):
    period_type = serializers.ChoiceField(choices=TREND_PERIODS, default='monthly')


class ExportQuerySerializer(DateRangeQuerySerializer):
    """
    Validate export query parameters.

    Accepts the parameters of every exportable report; each report reads
    only the ones it knows.

    Query Parameters:
        file_type (str): csv | xlsx | pdf
        status (str): Closed report status filter
        group_by (str): Sales report grouping
    """

    file_type = serializers.ChoiceField(choices=FILE_TYPES, default='csv')
    status = serializers.ChoiceField(choices=CLOSED_STATUSES, default='all')
    group_by = serializers.ChoiceField(choices=SALES_GROUPINGS, default='monthly')


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class DashboardStatsSerializer(serializers.Serializer):
    date_range = serializers.CharField()
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    total_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_invoices = serializers.IntegerField()
    pending_invoices = serializers.IntegerField()
    active_parties = serializers.IntegerField()
    outstanding_amount = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_brokerage_inr = serializers.DecimalField(max_digits=16, decimal_places=2)
    received_brokerage = serializers.DecimalField(max_digits=16, decimal_places=2)
    pending_brokerage = serializers.DecimalField(max_digits=16, decimal_places=2)


class ReportTotalsSerializer(serializers.Serializer):
    invoice_count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_brokerage = serializers.DecimalField(max_digits=16, decimal_places=2)


class OutstandingRowSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    invoice_number = serializers.CharField()
    invoice_date = serializers.DateField()
    due_date = serializers.DateField()
    status = serializers.CharField()
    currency = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    brokerage_inr = serializers.DecimalField(max_digits=14, decimal_places=2)
    party_id = serializers.UUIDField()
    party_name = serializers.CharField()
    buyer_name = serializers.CharField()
    days_overdue = serializers.IntegerField()


class OutstandingReportSerializer(serializers.Serializer):
    invoices = OutstandingRowSerializer(many=True)
    totals = ReportTotalsSerializer()
    date_from = serializers.DateField(allow_null=True)
    date_to = serializers.DateField(allow_null=True)


class ClosedRowSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    invoice_number = serializers.CharField()
    invoice_date = serializers.DateField()
    closed_date = serializers.DateField()
    status = serializers.CharField()
    is_closed = serializers.BooleanField()
    currency = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    brokerage_inr = serializers.DecimalField(max_digits=14, decimal_places=2)
    party_id = serializers.UUIDField()
    party_name = serializers.CharField()
    buyer_name = serializers.CharField()


class ClosedReportSerializer(serializers.Serializer):
    invoices = ClosedRowSerializer(many=True)
    totals = ReportTotalsSerializer()
    status = serializers.CharField()
    date_from = serializers.DateField(allow_null=True)
    date_to = serializers.DateField(allow_null=True)


class SalesPeriodSerializer(serializers.Serializer):
    id = serializers.CharField()
    label = serializers.CharField()
    invoice_count = serializers.IntegerField()
    gross_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    brokerage = serializers.DecimalField(max_digits=16, decimal_places=2)
    received_brokerage = serializers.DecimalField(max_digits=16, decimal_places=2)
    net_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    currencies = serializers.DictField()


class SalesTotalsSerializer(serializers.Serializer):
    invoice_count = serializers.IntegerField()
    gross_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    brokerage = serializers.DecimalField(max_digits=16, decimal_places=2)
    received_brokerage = serializers.DecimalField(max_digits=16, decimal_places=2)
    net_sales = serializers.DecimalField(max_digits=16, decimal_places=2)


class SalesReportSerializer(serializers.Serializer):
    periods = SalesPeriodSerializer(many=True)
    totals = SalesTotalsSerializer()
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    group_by = serializers.CharField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
