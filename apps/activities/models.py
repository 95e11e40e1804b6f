from django.db import models
import uuid


class ActivityType(models.TextChoices):
    PARTY_ADDED = 'party_added', 'Party Added'
    PARTY_UPDATED = 'party_updated', 'Party Updated'
    PARTY_DELETED = 'party_deleted', 'Party Deleted'
    INVOICE_CREATED = 'invoice_created', 'Invoice Created'
    INVOICE_UPDATED = 'invoice_updated', 'Invoice Updated'
    INVOICE_DELETED = 'invoice_deleted', 'Invoice Deleted'
    INVOICE_CLOSED = 'invoice_closed', 'Invoice Closed'
    INVOICE_REOPENED = 'invoice_reopened', 'Invoice Reopened'
    STATUS_CHANGED = 'status_changed', 'Status Changed'
    PAYMENT_RECEIVED = 'payment_received', 'Payment Received'
    TRANSACTION_RECORDED = 'transaction_recorded', 'Transaction Recorded'


class Activity(models.Model):
    """Audit feed entry describing a state change."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activities'
    )
    type = models.CharField(max_length=30, choices=ActivityType.choices)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    party = models.ForeignKey(
        'parties.Party',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activities'
    )
    # Removed explicitly by the invoice delete cascade
    invoice = models.ForeignKey(
        'invoices.Invoice',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='activities'
    )

    class Meta:
        db_table = 'activities'
        ordering = ['-timestamp']
        verbose_name_plural = 'activities'
        indexes = [
            models.Index(fields=['-timestamp']),
            models.Index(fields=['type']),
        ]

    def __str__(self):
        return f"{self.get_type_display()}: {self.title}"
