from decimal import Decimal

from rest_framework import serializers
from apps.parties.models import Party
from apps.parties.serializers import PartySummarySerializer
from .models import (
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    Currency,
    PaymentTerms,
    Transaction,
    TransactionType,
)


# =============================================================================
# Input Serializers
# =============================================================================

class InvoiceFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for invoice filtering.

    Query Parameters:
        status (str): pending | paid | cancelled
        party (UUID): Invoices where the party is seller or buyer
        currency (str): Invoice currency code
        is_closed (bool): Closed flag
        date_from (date): Invoice date on or after
        date_to (date): Invoice date on or before
        search (str): Match invoice number, reference or party names
    """

    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    party = serializers.UUIDField(required=False)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    is_closed = serializers.BooleanField(required=False, allow_null=True, default=None)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be on or after start date'
            })

        return attrs


class InvoiceItemInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    rate = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.00'))


class InvoiceWriteSerializer(serializers.Serializer):
    """
    Validate create/update payloads for invoices.

    Money figures (subtotal, brokerage, total) are not accepted; they are
    always computed from the items.
    """

    party = serializers.PrimaryKeyRelatedField(queryset=Party.objects.all())
    buyer = serializers.PrimaryKeyRelatedField(queryset=Party.objects.all())
    invoice_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    invoice_no = serializers.CharField(max_length=50, required=False, allow_blank=True)
    invoice_date = serializers.DateField()
    due_days = serializers.IntegerField(min_value=0, required=False, default=0)
    terms = serializers.ChoiceField(choices=PaymentTerms.choices, required=False, default=PaymentTerms.DAYS)
    due_date = serializers.DateField(required=False, allow_null=True)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    exchange_rate = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01'),
        required=False
    )
    brokerage_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False
    )
    received_brokerage = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False
    )
    notes = serializers.CharField(required=False, allow_blank=True)
    remarks = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    items = InvoiceItemInputSerializer(many=True, required=False)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required')
        return value

    def validate(self, attrs):
        if not self.partial and 'items' not in attrs:
            raise serializers.ValidationError({'items': 'At least one item is required'})

        party = attrs.get('party')
        buyer = attrs.get('buyer')
        if party and buyer and party.pk == buyer.pk:
            raise serializers.ValidationError({
                'buyer': 'Seller and buyer must be different parties'
            })

        due_date = attrs.get('due_date')
        invoice_date = attrs.get('invoice_date')
        if due_date and invoice_date and due_date < invoice_date:
            raise serializers.ValidationError({
                'due_date': 'Due date cannot be before the invoice date'
            })

        return attrs


class InvoiceStatusSerializer(serializers.Serializer):
    # Checked against InvoiceStatus by update_invoice_status
    status = serializers.CharField(max_length=20)


class InvoiceNotesSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True)


class InvoiceCloseSerializer(serializers.Serializer):
    is_closed = serializers.BooleanField(default=True)


class RecentInvoicesSerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=50, default=5)


class TransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for transaction filtering.

    Query Parameters:
        party (UUID): Filter by party
        invoice (UUID): Filter by invoice
        type (str): payment | refund | adjustment
    """

    party = serializers.UUIDField(required=False)
    invoice = serializers.UUIDField(required=False)
    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)


class TransactionCreateSerializer(serializers.Serializer):
    party = serializers.PrimaryKeyRelatedField(queryset=Party.objects.all())
    invoice = serializers.PrimaryKeyRelatedField(
        queryset=Invoice.objects.all(),
        required=False,
        allow_null=True
    )
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    type = serializers.ChoiceField(choices=TransactionType.choices, default=TransactionType.PAYMENT)
    date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class InvoiceItemSerializer(serializers.ModelSerializer):

    class Meta:
        model = InvoiceItem
        fields = ['id', 'line_number', 'description', 'quantity', 'rate', 'amount']
        read_only_fields = fields


class InvoiceListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    party = PartySummarySerializer(read_only=True)
    buyer = PartySummarySerializer(read_only=True)
    days_overdue = serializers.IntegerField(read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'invoice_no',
            'invoice_date',
            'due_date',
            'currency',
            'subtotal',
            'brokerage_amount',
            'brokerage_inr',
            'total',
            'status',
            'is_closed',
            'payment_date',
            'days_overdue',
            'party',
            'buyer',
            'created_at',
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    """Full invoice with items."""

    party = PartySummarySerializer(read_only=True)
    buyer = PartySummarySerializer(read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)
    days_overdue = serializers.IntegerField(read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'invoice_no',
            'invoice_date',
            'due_days',
            'terms',
            'due_date',
            'currency',
            'exchange_rate',
            'brokerage_rate',
            'subtotal',
            'brokerage_amount',
            'brokerage_inr',
            'received_brokerage',
            'balance_brokerage',
            'total',
            'status',
            'is_closed',
            'payment_date',
            'days_overdue',
            'notes',
            'remarks',
            'party',
            'buyer',
            'items',
            'created_by',
            'created_by_name',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        return obj.created_by.get_display_name() if obj.created_by else None


class TransactionSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source='party.name', read_only=True)
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'amount',
            'date',
            'type',
            'notes',
            'reference',
            'party',
            'party_name',
            'invoice',
            'invoice_number',
            'created_by',
            'created_at',
        ]
        read_only_fields = fields
