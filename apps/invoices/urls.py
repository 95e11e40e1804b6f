from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import InvoiceViewSet, TransactionViewSet

app_name = 'invoices'

router = DefaultRouter()
router.register(r'invoices', InvoiceViewSet, basename='invoice')
router.register(r'transactions', TransactionViewSet, basename='transaction')

urlpatterns = [
    # GET    /api/invoices/                 - List invoices (paginated, filterable)
    # POST   /api/invoices/                 - Create invoice with items
    # GET    /api/invoices/recent/          - Most recent invoices
    # GET    /api/invoices/{id}/            - Invoice with items
    # PATCH  /api/invoices/{id}/            - Edit invoice
    # DELETE /api/invoices/{id}/            - Delete invoice and dependents
    # GET    /api/invoices/{id}/items/      - Line items
    # PATCH  /api/invoices/{id}/notes/      - Replace notes
    # PATCH  /api/invoices/{id}/status/     - Change payment status
    # POST   /api/invoices/{id}/close/      - Close or reopen the bill
    # GET    /api/transactions/             - List transactions
    # POST   /api/transactions/             - Record a transaction
    path('', include(router.urls)),
]
