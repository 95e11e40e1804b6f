from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.db.models import Q
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.roles.permissions import HasAppPermission
from .models import Invoice, Transaction
from .serializers import (
    InvoiceSerializer,
    InvoiceListSerializer,
    InvoiceItemSerializer,
    InvoiceWriteSerializer,
    InvoiceFilterSerializer,
    InvoiceStatusSerializer,
    InvoiceNotesSerializer,
    InvoiceCloseSerializer,
    RecentInvoicesSerializer,
    TransactionSerializer,
    TransactionCreateSerializer,
    TransactionFilterSerializer,
)
from .services import (
    create_invoice,
    update_invoice,
    update_invoice_notes,
    update_invoice_status,
    set_invoice_closed,
    delete_invoice,
    record_transaction,
)


class InvoicePagination(PageNumberPagination):
    """Custom pagination for invoices and transactions."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class InvoiceViewSet(viewsets.ModelViewSet):
    """
    ViewSet for invoices.

    list: Paginated invoices, filterable by status/party/currency/is_closed/dates
    create: Create an invoice with items (figures computed server-side)
    retrieve: Invoice with items
    update / partial_update: Edit header and optionally replace items
    destroy: Delete invoice with its items, transactions and activity
    """

    queryset = Invoice.objects.select_related('party', 'buyer', 'created_by')
    serializer_class = InvoiceSerializer
    permission_classes = [HasAppPermission]
    pagination_class = InvoicePagination
    lookup_value_regex = '[0-9a-f-]{36}'
    required_permissions = {
        'list': 'invoices.view',
        'retrieve': 'invoices.view',
        'recent': 'invoices.view',
        'items': 'invoices.view',
        'create': 'invoices.create',
        'update': 'invoices.edit',
        'partial_update': 'invoices.edit',
        'notes': 'invoices.edit',
        'change_status': 'invoices.edit',
        'close': 'invoices.close',
        'destroy': 'invoices.delete',
    }

    def get_queryset(self):
        """Filter invoices using input serializer validation."""
        queryset = super().get_queryset()

        if self.action != 'list':
            return queryset.prefetch_related('items')

        filter_serializer = InvoiceFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'party' in params:
            queryset = queryset.filter(Q(party_id=params['party']) | Q(buyer_id=params['party']))
        if 'currency' in params:
            queryset = queryset.filter(currency=params['currency'])
        if params.get('is_closed') is not None:
            queryset = queryset.filter(is_closed=params['is_closed'])
        if 'date_from' in params:
            queryset = queryset.filter(invoice_date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(invoice_date__lte=params['date_to'])

        search = params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(invoice_number__icontains=search) |
                Q(invoice_no__icontains=search) |
                Q(party__name__icontains=search) |
                Q(buyer__name__icontains=search)
            )

        return queryset.order_by('-invoice_date', '-created_at')

    def get_serializer_class(self):
        if self.action == 'list':
            return InvoiceListSerializer
        return InvoiceSerializer

    def _detail(self, invoice_id):
        return InvoiceSerializer(self.get_queryset().get(pk=invoice_id)).data

    @extend_schema(
        parameters=[
            OpenApiParameter('status', OpenApiTypes.STR, description='pending | paid | cancelled'),
            OpenApiParameter('party', OpenApiTypes.UUID, description='Seller or buyer party'),
            OpenApiParameter('currency', OpenApiTypes.STR),
            OpenApiParameter('is_closed', OpenApiTypes.BOOL),
            OpenApiParameter('date_from', OpenApiTypes.DATE),
            OpenApiParameter('date_to', OpenApiTypes.DATE),
            OpenApiParameter('search', OpenApiTypes.STR),
        ],
        tags=['invoices'],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(tags=['invoices'])
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(request=InvoiceWriteSerializer, responses={201: InvoiceSerializer}, tags=['invoices'])
    def create(self, request, *args, **kwargs):
        serializer = InvoiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data.copy()

        # New invoices always start pending
        data.pop('status', None)
        data['invoice_number'] = data.get('invoice_number') or None

        invoice = create_invoice(user=request.user, **data)
        return Response(self._detail(invoice.id), status=status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceWriteSerializer, responses={200: InvoiceSerializer}, tags=['invoices'])
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        invoice = self.get_object()

        serializer = InvoiceWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data.copy()
        data.pop('invoice_number', None)

        update_invoice(invoice_id=invoice.id, user=request.user, **data)
        return Response(self._detail(invoice.id))

    @extend_schema(request=InvoiceWriteSerializer, responses={200: InvoiceSerializer}, tags=['invoices'])
    def partial_update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return self.update(request, *args, **kwargs)

    @extend_schema(responses={204: None}, tags=['invoices'])
    def destroy(self, request, *args, **kwargs):
        delete_invoice(invoice_id=kwargs['pk'], user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[OpenApiParameter('limit', OpenApiTypes.INT, description='Number of invoices (1-50)', default=5)],
        responses={200: InvoiceListSerializer(many=True)},
        tags=['invoices'],
    )
    @action(detail=False, methods=['get'])
    def recent(self, request):
        """
        Most recently created invoices.

        GET /api/invoices/recent/?limit=5
        """
        params_serializer = RecentInvoicesSerializer(data=request.query_params)
        params_serializer.is_valid(raise_exception=True)
        limit = params_serializer.validated_data['limit']

        invoices = (
            Invoice.objects
            .select_related('party', 'buyer')
            .order_by('-created_at')[:limit]
        )
        return Response(InvoiceListSerializer(invoices, many=True).data)

    @extend_schema(responses={200: InvoiceItemSerializer(many=True)}, tags=['invoices'])
    @action(detail=True, methods=['get'])
    def items(self, request, pk=None):
        """
        Line items of an invoice.

        GET /api/invoices/{id}/items/
        """
        invoice = self.get_object()
        return Response(InvoiceItemSerializer(invoice.items.all(), many=True).data)

    @extend_schema(request=InvoiceNotesSerializer, responses={200: InvoiceSerializer}, tags=['invoices'])
    @action(detail=True, methods=['patch'])
    def notes(self, request, pk=None):
        """
        Replace invoice notes.

        PATCH /api/invoices/{id}/notes/
        Body: {"notes": "..."}
        """
        serializer = InvoiceNotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = update_invoice_notes(invoice_id=pk, notes=serializer.validated_data['notes'])
        return Response(self._detail(invoice.id))

    @extend_schema(request=InvoiceStatusSerializer, responses={200: InvoiceSerializer}, tags=['invoices'])
    @action(detail=True, methods=['patch'], url_path='status')
    def change_status(self, request, pk=None):
        """
        Change payment status.

        PATCH /api/invoices/{id}/status/
        Body: {"status": "paid"}
        """
        serializer = InvoiceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = update_invoice_status(
            invoice_id=pk,
            status=serializer.validated_data['status'],
            user=request.user
        )
        return Response(self._detail(invoice.id))

    @extend_schema(request=InvoiceCloseSerializer, responses={200: InvoiceSerializer}, tags=['invoices'])
    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        """
        Close (settle) or reopen a bill.

        POST /api/invoices/{id}/close/
        Body: {"is_closed": true}
        """
        serializer = InvoiceCloseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = set_invoice_closed(
            invoice_id=pk,
            is_closed=serializer.validated_data['is_closed'],
            user=request.user
        )
        return Response(self._detail(invoice.id))


class TransactionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for payment transactions.

    list: Paginated transactions, filterable by party/invoice/type
    retrieve: Get a transaction
    create: Record a payment, refund or adjustment
    """

    queryset = Transaction.objects.select_related('party', 'invoice')
    serializer_class = TransactionSerializer
    permission_classes = [HasAppPermission]
    pagination_class = InvoicePagination
    lookup_value_regex = '[0-9a-f-]{36}'
    required_permissions = {
        'list': 'invoices.view',
        'retrieve': 'invoices.view',
        'create': 'invoices.edit',
    }

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = TransactionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'party' in params:
            queryset = queryset.filter(party_id=params['party'])
        if 'invoice' in params:
            queryset = queryset.filter(invoice_id=params['invoice'])
        if 'type' in params:
            queryset = queryset.filter(type=params['type'])

        return queryset

    @extend_schema(
        parameters=[
            OpenApiParameter('party', OpenApiTypes.UUID),
            OpenApiParameter('invoice', OpenApiTypes.UUID),
            OpenApiParameter('type', OpenApiTypes.STR, description='payment | refund | adjustment'),
        ],
        tags=['transactions'],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(tags=['transactions'])
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(request=TransactionCreateSerializer, responses={201: TransactionSerializer}, tags=['transactions'])
    def create(self, request, *args, **kwargs):
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        txn = record_transaction(user=request.user, **serializer.validated_data)
        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)
