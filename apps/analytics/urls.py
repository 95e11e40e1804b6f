from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Dashboard
    path('dashboard/stats/', views.dashboard_stats, name='dashboard-stats'),

    # Reports
    path('reports/outstanding/', views.outstanding_report, name='outstanding-report'),
    path('reports/closed/', views.closed_report, name='closed-report'),
    path('reports/sales/', views.sales_report, name='sales-report'),
    path('reports/<str:report>/export/', views.export_report_file, name='report-export'),

    # Analytics
    path('analytics/brokerage/', views.brokerage_analytics, name='brokerage'),
    path('analytics/party-sales/', views.party_sales, name='party-sales'),
    path('analytics/sales-trends/', views.sales_trends, name='sales-trends'),
]
