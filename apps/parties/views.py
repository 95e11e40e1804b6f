from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django.db.models import Q
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.roles.permissions import HasAppPermission
from apps.invoices.models import Invoice, Transaction
from apps.invoices.serializers import InvoiceListSerializer, TransactionSerializer
from .models import Party
from .serializers import (
    PartySerializer,
    PartyInputSerializer,
    PartyFilterSerializer,
    PartyNameCheckSerializer,
    PartyNameCheckResponseSerializer,
    HasInvoicesResponseSerializer,
)
from .services import (
    create_party,
    update_party,
    delete_party,
    is_party_name_available,
    find_similar_parties,
    PartyNotFoundError,
    DuplicatePartyError,
    PartyHasRelatedRecordsError,
)


class PartyViewSet(viewsets.ModelViewSet):
    """
    ViewSet for parties (customers and vendors).

    list: All parties with outstanding balance, filterable by ?search=
    create: Add a party
    retrieve: Get a party
    update / partial_update: Edit a party
    destroy: Delete a party that has no invoices or transactions
    """

    serializer_class = PartySerializer
    permission_classes = [HasAppPermission]
    lookup_value_regex = '[0-9a-f-]{36}'
    required_permissions = {
        'list': 'parties.view',
        'retrieve': 'parties.view',
        'invoices': 'parties.view',
        'transactions': 'parties.view',
        'has_invoices': 'parties.view',
        'check_name': 'parties.view',
        'create': 'parties.create',
        'update': 'parties.edit',
        'partial_update': 'parties.edit',
        'destroy': 'parties.delete',
    }

    def get_queryset(self):
        queryset = Party.objects.with_balances()

        if self.action == 'list':
            filter_serializer = PartyFilterSerializer(data=self.request.query_params)
            filter_serializer.is_valid(raise_exception=True)
            search = filter_serializer.validated_data.get('search', '').strip()
            if search:
                queryset = queryset.filter(
                    Q(name__icontains=search) |
                    Q(contact_person__icontains=search) |
                    Q(phone__icontains=search) |
                    Q(email__icontains=search)
                )

        return queryset.order_by('name')

    def _with_balances(self, party):
        return self.get_queryset().get(pk=party.pk)

    @extend_schema(
        parameters=[OpenApiParameter('search', OpenApiTypes.STR, description='Search name, contact, phone or email')],
        tags=['parties'],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(tags=['parties'])
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(request=PartyInputSerializer, responses={201: PartySerializer}, tags=['parties'])
    def create(self, request, *args, **kwargs):
        serializer = PartyInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            party = create_party(user=request.user, **serializer.validated_data)
        except DuplicatePartyError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            PartySerializer(self._with_balances(party)).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(request=PartyInputSerializer, responses={200: PartySerializer}, tags=['parties'])
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = PartyInputSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            party = update_party(party_id=kwargs['pk'], user=request.user, **serializer.validated_data)
        except PartyNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except DuplicatePartyError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PartySerializer(self._with_balances(party)).data)

    @extend_schema(request=PartyInputSerializer, responses={200: PartySerializer}, tags=['parties'])
    def partial_update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return self.update(request, *args, **kwargs)

    @extend_schema(responses={204: None}, tags=['parties'])
    def destroy(self, request, *args, **kwargs):
        try:
            delete_party(party_id=kwargs['pk'], user=request.user)
        except PartyNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PartyHasRelatedRecordsError as e:
            return Response(
                {'error': 'Party has related records', 'message': str(e)},
                status=status.HTTP_409_CONFLICT
            )

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: InvoiceListSerializer(many=True)}, tags=['parties'])
    @action(detail=True, methods=['get'])
    def invoices(self, request, pk=None):
        """
        Invoices where the party is seller or buyer.

        GET /api/parties/{id}/invoices/
        """
        party = self.get_object()
        invoices = (
            Invoice.objects
            .filter(Q(party=party) | Q(buyer=party))
            .select_related('party', 'buyer')
            .order_by('-invoice_date', '-created_at')
        )
        return Response(InvoiceListSerializer(invoices, many=True).data)

    @extend_schema(responses={200: TransactionSerializer(many=True)}, tags=['parties'])
    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        """
        Transactions recorded for the party.

        GET /api/parties/{id}/transactions/
        """
        party = self.get_object()
        transactions = (
            Transaction.objects
            .filter(party=party)
            .select_related('party', 'invoice')
        )
        return Response(TransactionSerializer(transactions, many=True).data)

    @extend_schema(responses={200: HasInvoicesResponseSerializer}, tags=['parties'])
    @action(detail=True, methods=['get'], url_path='has-invoices')
    def has_invoices(self, request, pk=None):
        """
        Whether any invoice references the party.

        GET /api/parties/{id}/has-invoices/
        """
        party = self.get_object()
        count = Invoice.objects.filter(Q(party=party) | Q(buyer=party)).count()
        return Response({
            'has_invoices': count > 0,
            'invoice_count': count,
        })

    @extend_schema(
        parameters=[
            OpenApiParameter('name', OpenApiTypes.STR, required=True, description='Candidate party name'),
            OpenApiParameter('exclude', OpenApiTypes.UUID, description='Party being edited'),
        ],
        responses={200: PartyNameCheckResponseSerializer},
        tags=['parties'],
    )
    @action(detail=False, methods=['get'], url_path='check-name')
    def check_name(self, request):
        """
        Check name availability and suggest similar existing names.

        GET /api/parties/check-name/?name=<name>&exclude=<uuid>
        """
        serializer = PartyNameCheckSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        name = serializer.validated_data['name']
        exclude_id = serializer.validated_data.get('exclude')

        available = is_party_name_available(name=name, exclude_id=exclude_id)
        similar = find_similar_parties(name=name, exclude_id=exclude_id)

        return Response({
            'available': available,
            'message': 'Name is available' if available else 'A party with this name already exists',
            'similar_names': [
                {'id': party.id, 'name': party.name, 'similarity': score}
                for party, score in similar
            ],
        })
