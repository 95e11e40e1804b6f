import pytest
from decimal import Decimal
from django.urls import reverse
from django.utils import timezone
from rest_framework import status


# =============================================================================
# Dashboard
# =============================================================================

@pytest.mark.django_db
class TestDashboardStatsEndpoint:
    """Tests for GET /api/dashboard/stats/"""

    def test_default_range(self, authenticated_client, make_invoice):
        make_invoice(invoice_date=timezone.localdate())

        response = authenticated_client.get(reverse('analytics:dashboard-stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['date_range'] == 'month'
        assert response.data['total_invoices'] == 1
        assert response.data['outstanding_amount'] == Decimal('1511.25')

    def test_invalid_range(self, authenticated_client):
        response = authenticated_client.get(reverse('analytics:dashboard-stats'), {'date_range': 'decade'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_viewer_can_see_dashboard(self, viewer_client):
        response = viewer_client.get(reverse('analytics:dashboard-stats'), {'date_range': 'year'})

        assert response.status_code == status.HTTP_200_OK

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('analytics:dashboard-stats'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Reports
# =============================================================================

@pytest.mark.django_db
class TestReportEndpoints:
    """Tests for /api/reports/*"""

    def test_outstanding(self, authenticated_client, q1_invoices):
        response = authenticated_client.get(reverse('analytics:outstanding-report'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totals']['invoice_count'] == 2
        assert response.data['totals']['total_amount'] == Decimal('2518.75')

    def test_outstanding_reversed_range(self, authenticated_client):
        response = authenticated_client.get(
            reverse('analytics:outstanding-report'),
            {'date_from': '2025-03-31', 'date_to': '2025-01-01'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_closed_by_status(self, authenticated_client, q1_invoices):
        response = authenticated_client.get(reverse('analytics:closed-report'), {'status': 'cancelled'})

        assert response.status_code == status.HTTP_200_OK
        assert [row['invoice_number'] for row in response.data['invoices']] == [
            q1_invoices['feb_cancelled'].invoice_number
        ]

    def test_sales_quarterly(self, authenticated_client, q1_invoices):
        response = authenticated_client.get(
            reverse('analytics:sales-report'),
            {'date_from': '2025-01-01', 'date_to': '2025-03-31', 'group_by': 'quarterly'}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['periods'][0]['label'] == 'Q1 2025'
        assert response.data['totals']['net_sales'] == Decimal('3528.75')

    def test_sales_unknown_grouping(self, authenticated_client):
        response = authenticated_client.get(reverse('analytics:sales-report'), {'group_by': 'hourly'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_viewer_cannot_see_reports(self, viewer_client):
        response = viewer_client.get(reverse('analytics:outstanding-report'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestReportExportEndpoint:
    """Tests for GET /api/reports/{report}/export/"""

    def test_csv_attachment(self, authenticated_client, q1_invoices):
        url = reverse('analytics:report-export', kwargs={'report': 'outstanding'})
        response = authenticated_client.get(url, {'file_type': 'csv'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'text/csv'
        today = timezone.localdate().isoformat()
        assert response['Content-Disposition'] == f'attachment; filename="outstanding_{today}.csv"'
        assert b'Invoice Number' in response.content

    def test_xlsx_attachment(self, authenticated_client, q1_invoices):
        url = reverse('analytics:report-export', kwargs={'report': 'sales'})
        response = authenticated_client.get(
            url,
            {'file_type': 'xlsx', 'date_from': '2025-01-01', 'date_to': '2025-03-31'}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Disposition'].startswith('attachment; filename="sales_')
        assert response['Content-Disposition'].endswith('.xlsx"')
        # Zip container
        assert response.content[:2] == b'PK'

    def test_pdf_inline_html(self, authenticated_client, q1_invoices):
        url = reverse('analytics:report-export', kwargs={'report': 'closed'})
        response = authenticated_client.get(url, {'file_type': 'pdf', 'status': 'paid'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'].startswith('text/html')
        assert response['Content-Disposition'].startswith('inline; filename="closed_')
        assert q1_invoices['feb_usd'].invoice_number.encode() in response.content
        assert b'BussNote' in response.content

    def test_default_file_type_is_csv(self, authenticated_client):
        url = reverse('analytics:report-export', kwargs={'report': 'outstanding'})
        response = authenticated_client.get(url)

        assert response['Content-Type'] == 'text/csv'

    def test_unknown_report(self, authenticated_client):
        url = reverse('analytics:report-export', kwargs={'report': 'ledger'})
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unknown_file_type(self, authenticated_client):
        url = reverse('analytics:report-export', kwargs={'report': 'outstanding'})
        response = authenticated_client.get(url, {'file_type': 'docx'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reversed_range(self, authenticated_client):
        url = reverse('analytics:report-export', kwargs={'report': 'sales'})
        response = authenticated_client.get(url, {'date_from': '2025-03-31', 'date_to': '2025-01-01'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_viewer_cannot_export(self, viewer_client):
        url = reverse('analytics:report-export', kwargs={'report': 'outstanding'})
        response = viewer_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Analytics
# =============================================================================

@pytest.mark.django_db
class TestAnalyticsEndpoints:
    """Tests for /api/analytics/*"""

    Q1 = {'date_from': '2025-01-01', 'date_to': '2025-03-31'}

    def test_brokerage(self, authenticated_client, q1_invoices):
        response = authenticated_client.get(reverse('analytics:brokerage'), self.Q1)

        assert response.status_code == status.HTTP_200_OK
        assert [row['currency'] for row in response.data['by_currency']] == ['INR', 'USD']
        assert response.data['totals']['brokerage_percentage'] == Decimal('23.20')

    def test_party_sales(self, authenticated_client, q1_invoices, seller):
        response = authenticated_client.get(reverse('analytics:party-sales'), {**self.Q1, 'limit': 1})

        assert response.status_code == status.HTTP_200_OK
        assert [p['id'] for p in response.data['top_parties']] == [seller.id]

    def test_party_sales_limit_out_of_range(self, authenticated_client):
        response = authenticated_client.get(reverse('analytics:party-sales'), {'limit': 0})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_sales_trends_yearly(self, authenticated_client, q1_invoices):
        response = authenticated_client.get(reverse('analytics:sales-trends'), {**self.Q1, 'period_type': 'yearly'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['comparison']['period_type'] == 'year'
        assert [p['period'] for p in response.data['data']] == ['2025']

    @pytest.mark.parametrize('name', ['brokerage', 'party-sales', 'sales-trends'])
    def test_viewer_forbidden(self, viewer_client, name):
        response = viewer_client.get(reverse(f'analytics:{name}'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
