from django.core.validators import RegexValidator
from django.db import models
from django.db.models import OuterRef, Subquery, Sum, Max, DecimalField, Value
from django.db.models.functions import Coalesce, Lower
from decimal import Decimal
import uuid


phone_validator = RegexValidator(
    regex=r'^\+?[0-9\s-]{10,15}$',
    message='Enter a valid phone number (10-15 digits, optional +, spaces or dashes).',
)


class PartyQuerySet(models.QuerySet):

    def with_balances(self):
        """
        Annotate ``outstanding`` and ``last_transaction_date``.

        outstanding: sum of totals of pending invoices where the party is the seller.
        last_transaction_date: date of the party's latest transaction.
        """
        from apps.invoices.models import Invoice, InvoiceStatus, Transaction

        pending_totals = (
            Invoice.objects
            .filter(party=OuterRef('pk'), status=InvoiceStatus.PENDING)
            .order_by()
            .values('party')
            .annotate(total_sum=Sum('total'))
            .values('total_sum')
        )
        last_transaction = (
            Transaction.objects
            .filter(party=OuterRef('pk'))
            .order_by()
            .values('party')
            .annotate(last_date=Max('date'))
            .values('last_date')
        )
        return self.annotate(
            outstanding=Coalesce(
                Subquery(pending_totals, output_field=DecimalField(max_digits=14, decimal_places=2)),
                Value(Decimal('0.00')),
                output_field=DecimalField(max_digits=14, decimal_places=2),
            ),
            last_transaction_date=Subquery(last_transaction, output_field=models.DateField()),
        )


class Party(models.Model):
    """Customer or vendor that appears on invoices as seller or buyer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    contact_person = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=20, blank=True, validators=[phone_validator])
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    gstin = models.CharField('GSTIN', max_length=15, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PartyQuerySet.as_manager()

    class Meta:
        db_table = 'parties'
        ordering = ['name']
        verbose_name_plural = 'parties'
        constraints = [
            models.UniqueConstraint(Lower('name'), name='unique_party_name_ci'),
        ]

    def __str__(self):
        return self.name

    def has_related_records(self):
        """True when any invoice (as seller or buyer) or transaction references this party."""
        return (
            self.invoices_as_seller.exists()
            or self.invoices_as_buyer.exists()
            or self.transactions.exists()
        )
