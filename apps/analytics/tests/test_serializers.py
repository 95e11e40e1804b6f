import pytest
from datetime import date
from apps.analytics.serializers import (
    DashboardQuerySerializer,
    DateRangeQuerySerializer,
    ClosedReportQuerySerializer,
    SalesReportQuerySerializer,
    PartySalesQuerySerializer,
    SalesTrendsQuerySerializer,
    ExportQuerySerializer,
)


# =============================================================================
# Input Serializer Tests
# =============================================================================

class TestDashboardQuerySerializer:

    def test_default_month(self):
        serializer = DashboardQuerySerializer(data={})

        assert serializer.is_valid()
        assert serializer.validated_data['date_range'] == 'month'

    def test_invalid_range(self):
        serializer = DashboardQuerySerializer(data={'date_range': 'fortnight'})

        assert not serializer.is_valid()
        assert 'date_range' in serializer.errors


class TestDateRangeQuerySerializer:

    def test_valid_range(self):
        serializer = DateRangeQuerySerializer(data={'date_from': '2025-01-01', 'date_to': '2025-03-31'})

        assert serializer.is_valid()
        assert serializer.validated_data == {'date_from': date(2025, 1, 1), 'date_to': date(2025, 3, 31)}

    def test_single_day(self):
        serializer = DateRangeQuerySerializer(data={'date_from': '2025-01-01', 'date_to': '2025-01-01'})

        assert serializer.is_valid()

    def test_reversed_range(self):
        serializer = DateRangeQuerySerializer(data={'date_from': '2025-03-31', 'date_to': '2025-01-01'})

        assert not serializer.is_valid()
        assert 'date_to' in serializer.errors

    def test_bad_date(self):
        serializer = DateRangeQuerySerializer(data={'date_from': '31/03/2025'})

        assert not serializer.is_valid()

    def test_both_optional(self):
        serializer = DateRangeQuerySerializer(data={})

        assert serializer.is_valid()
        assert serializer.validated_data == {}


class TestReportQuerySerializers:

    def test_closed_status_default(self):
        serializer = ClosedReportQuerySerializer(data={})

        assert serializer.is_valid()
        assert serializer.validated_data['status'] == 'all'

    def test_closed_status_rejects_pending(self):
        serializer = ClosedReportQuerySerializer(data={'status': 'pending'})

        assert not serializer.is_valid()

    @pytest.mark.parametrize('group_by', ['daily', 'weekly', 'monthly', 'quarterly'])
    def test_sales_groupings(self, group_by):
        assert SalesReportQuerySerializer(data={'group_by': group_by}).is_valid()

    def test_sales_inherits_range_check(self):
        serializer = SalesReportQuerySerializer(data={'date_from': '2025-02-01', 'date_to': '2025-01-01'})

        assert not serializer.is_valid()

    @pytest.mark.parametrize('limit,valid', [(1, True), (100, True), (0, False), (101, False)])
    def test_party_sales_limit_bounds(self, limit, valid):
        assert PartySalesQuerySerializer(data={'limit': limit}).is_valid() is valid

    def test_trends_yearly(self):
        serializer = SalesTrendsQuerySerializer(data={'period_type': 'yearly'})

        assert serializer.is_valid()

    def test_trends_rejects_daily(self):
        assert not SalesTrendsQuerySerializer(data={'period_type': 'daily'}).is_valid()


class TestExportQuerySerializer:

    def test_defaults(self):
        serializer = ExportQuerySerializer(data={})

        assert serializer.is_valid()
        assert serializer.validated_data['file_type'] == 'csv'
        assert serializer.validated_data['status'] == 'all'
        assert serializer.validated_data['group_by'] == 'monthly'

    def test_unknown_file_type(self):
        serializer = ExportQuerySerializer(data={'file_type': 'docx'})

        assert not serializer.is_valid()
        assert 'file_type' in serializer.errors
