from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
import uuid


class InvoiceStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    CANCELLED = 'cancelled', 'Cancelled'


class Currency(models.TextChoices):
    INR = 'INR', 'Indian Rupee'
    USD = 'USD', 'US Dollar'
    EUR = 'EUR', 'Euro'
    GBP = 'GBP', 'British Pound'
    AED = 'AED', 'UAE Dirham'
    CAD = 'CAD', 'Canadian Dollar'


class PaymentTerms(models.TextChoices):
    DAYS = 'Days', 'Days'
    DAYS_FIX = 'Days Fix', 'Days Fix'
    DAYS_DA = 'Days D/A', 'Days D/A'
    DAYS_BD = 'Days B/D', 'Days B/D'
    DAYS_AD = 'Days A/D', 'Days A/D'


class TransactionType(models.TextChoices):
    PAYMENT = 'payment', 'Payment'
    REFUND = 'refund', 'Refund'
    ADJUSTMENT = 'adjustment', 'Adjustment'


def money_field(**kwargs):
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(max_digits=14, decimal_places=2, **kwargs)


class Invoice(models.Model):
    """Sale between a seller and a buyer party, with brokerage tracking."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Numbering
    invoice_number = models.CharField(max_length=30, unique=True)
    invoice_no = models.CharField(max_length=50, blank=True, help_text='Reference number printed on the bill')

    # Dates and terms
    invoice_date = models.DateField()
    due_days = models.PositiveIntegerField(default=0)
    terms = models.CharField(max_length=10, choices=PaymentTerms.choices, default=PaymentTerms.DAYS)
    due_date = models.DateField()

    # Currency and brokerage inputs
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.INR)
    exchange_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    brokerage_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.75'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )

    # Derived figures (always recomputed from items)
    subtotal = money_field()
    brokerage_amount = money_field()
    brokerage_inr = money_field()
    received_brokerage = money_field()
    balance_brokerage = money_field()
    total = money_field()

    # State
    status = models.CharField(
        max_length=10,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.PENDING
    )
    is_closed = models.BooleanField(default=False)
    payment_date = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)
    remarks = models.TextField(blank=True)

    # Relations
    party = models.ForeignKey(
        'parties.Party',
        on_delete=models.PROTECT,
        related_name='invoices_as_seller'
    )
    buyer = models.ForeignKey(
        'parties.Party',
        on_delete=models.PROTECT,
        related_name='invoices_as_buyer'
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-invoice_date', '-created_at']
        indexes = [
            models.Index(fields=['status', 'invoice_date']),
            models.Index(fields=['due_date']),
            models.Index(fields=['payment_date']),
            models.Index(fields=['currency']),
        ]

    def __str__(self):
        return self.invoice_number

    @property
    def days_overdue(self):
        """Days past due for unpaid invoices, 0 otherwise."""
        if self.status != InvoiceStatus.PENDING:
            return 0
        return max((timezone.localdate() - self.due_date).days, 0)


class InvoiceItem(models.Model):
    """Line item owned by exactly one invoice."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name='items'
    )
    line_number = models.PositiveSmallIntegerField(default=1)
    description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    rate = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    amount = money_field()

    class Meta:
        db_table = 'invoice_items'
        ordering = ['invoice', 'line_number']

    def __str__(self):
        return f"{self.description} x{self.quantity}"


class Transaction(models.Model):
    """Money movement for a party, optionally tied to an invoice."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    date = models.DateField(default=timezone.localdate)
    type = models.CharField(
        max_length=12,
        choices=TransactionType.choices,
        default=TransactionType.PAYMENT
    )
    notes = models.TextField(blank=True)
    reference = models.CharField(max_length=100, blank=True)

    party = models.ForeignKey(
        'parties.Party',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    # Removed explicitly by the invoice delete cascade
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions'
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions_recorded'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'transactions'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['party', 'date']),
        ]

    def __str__(self):
        return f"{self.get_type_display()} {self.amount} ({self.date})"
