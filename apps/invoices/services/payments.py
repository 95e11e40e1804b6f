"""
Invoice status transitions and payment recording.

Status flow::

    pending --> paid        (creates one payment transaction, sets payment_date)
    pending --> cancelled
    cancelled --> pending | paid
    paid --> (terminal)
"""

import logging
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.activities.models import ActivityType
from apps.activities.services import log_activity
from apps.invoices.models import Invoice, InvoiceStatus, Transaction, TransactionType

from .exceptions import (
    InvoiceNotFoundError,
    InvalidStatusError,
    InvalidStatusTransitionError,
    TransactionValidationError,
)

logger = logging.getLogger(__name__)


def _mark_paid(invoice):
    invoice.status = InvoiceStatus.PAID
    invoice.payment_date = timezone.now()
    invoice.save(update_fields=['status', 'payment_date', 'updated_at'])


@transaction.atomic
def update_invoice_status(*, invoice_id: UUID, status: str, user) -> Invoice:
    """
    Move an invoice to ``status``.

    Transitioning to paid sets ``payment_date``, creates exactly one
    payment transaction for the invoice total and logs
    ``payment_received``. Re-applying the current status is a no-op.

    Args:
        invoice_id: Invoice to update
        status: 'pending', 'paid' or 'cancelled'
        user: User performing the change

    Returns:
        Updated Invoice

    Raises:
        InvalidStatusError: If status is not an allowed value
        InvoiceNotFoundError: If invoice does not exist
        InvalidStatusTransitionError: If the invoice is already paid
    """
    if status not in InvoiceStatus.values:
        raise InvalidStatusError()

    # Row lock keeps two concurrent "mark paid" calls from both creating a transaction
    try:
        invoice = (
            Invoice.objects
            .select_for_update()
            .select_related('party')
            .get(id=invoice_id)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError()

    if invoice.status == status:
        return invoice
    if invoice.status == InvoiceStatus.PAID:
        raise InvalidStatusTransitionError()

    previous = invoice.status

    if status == InvoiceStatus.PAID:
        _mark_paid(invoice)
        Transaction.objects.create(
            amount=invoice.total,
            date=timezone.localdate(),
            type=TransactionType.PAYMENT,
            notes=f"Payment for invoice {invoice.invoice_number}",
            party=invoice.party,
            invoice=invoice,
            created_by=user if user and user.is_authenticated else None,
        )
        log_activity(
            type=ActivityType.PAYMENT_RECEIVED,
            title=f"Payment received for {invoice.invoice_number}",
            description=f"{invoice.currency} {invoice.total} from {invoice.party.name}",
            user=user,
            party=invoice.party,
            invoice=invoice,
        )
    else:
        invoice.status = status
        invoice.save(update_fields=['status', 'updated_at'])
        log_activity(
            type=ActivityType.STATUS_CHANGED,
            title=f"Invoice {invoice.invoice_number} marked {status}",
            description=f"Status changed from {previous} to {status}",
            user=user,
            party=invoice.party,
            invoice=invoice,
        )

    logger.info("Invoice %s status %s -> %s", invoice.invoice_number, previous, status)
    return invoice


@transaction.atomic
def record_transaction(
    *,
    user,
    party,
    amount: Decimal,
    type: str = TransactionType.PAYMENT,
    date=None,
    invoice=None,
    notes: str = "",
    reference: str = "",
) -> Transaction:
    """
    Record a payment, refund or adjustment.

    A payment linked to a pending or cancelled invoice marks that invoice paid,
    without creating a second transaction.

    Raises:
        TransactionValidationError: If the party is not on the invoice
    """
    if invoice is not None:
        invoice = Invoice.objects.select_for_update().get(pk=invoice.pk)
        if party.pk not in (invoice.party_id, invoice.buyer_id):
            raise TransactionValidationError()

    txn = Transaction.objects.create(
        amount=amount,
        date=date or timezone.localdate(),
        type=type,
        notes=notes,
        reference=reference,
        party=party,
        invoice=invoice,
        created_by=user if user and user.is_authenticated else None,
    )

    if invoice is not None and type == TransactionType.PAYMENT and invoice.status != InvoiceStatus.PAID:
        _mark_paid(invoice)
        log_activity(
            type=ActivityType.PAYMENT_RECEIVED,
            title=f"Payment recorded for {invoice.invoice_number}",
            description=f"{amount} from {party.name}",
            user=user,
            party=party,
            invoice=invoice,
        )
    else:
        log_activity(
            type=ActivityType.TRANSACTION_RECORDED,
            title=f"{txn.get_type_display()} of {amount} recorded",
            description=f"Party: {party.name}",
            user=user,
            party=party,
            invoice=invoice,
        )

    logger.info("Transaction %s recorded for party %s", txn.id, party.id)
    return txn
