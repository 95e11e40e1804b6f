"""
Invoice create/update services.

Line items are replaced wholesale on edit and every money figure is
recomputed server-side from the items and brokerage inputs.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.activities.models import ActivityType
from apps.activities.services import log_activity
from apps.invoices.models import Invoice, InvoiceItem, InvoiceStatus, PaymentTerms

from .brokerage import calculate_invoice_figures, line_amount
from .exceptions import (
    InvoiceNotFoundError,
    SameSellerBuyerError,
    EmptyInvoiceError,
    DuplicateInvoiceNumberError,
)
from .numbering import next_invoice_number

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    'party',
    'buyer',
    'invoice_no',
    'invoice_date',
    'due_days',
    'terms',
    'due_date',
    'currency',
    'exchange_rate',
    'brokerage_rate',
    'received_brokerage',
    'notes',
    'remarks',
)


def _system_defaults():
    from apps.system.models import SystemSettings

    system = SystemSettings.load()
    return system.default_currency, system.default_brokerage_rate


def _build_items(invoice, items):
    return [
        InvoiceItem(
            invoice=invoice,
            line_number=position,
            description=item['description'],
            quantity=item['quantity'],
            rate=item['rate'],
            amount=line_amount(item['quantity'], item['rate']),
        )
        for position, item in enumerate(items, start=1)
    ]


def _apply_figures(invoice, items):
    figures = calculate_invoice_figures(
        items,
        brokerage_rate=invoice.brokerage_rate,
        exchange_rate=invoice.exchange_rate,
        currency=invoice.currency,
        received_brokerage=invoice.received_brokerage,
    )
    for field, value in figures.items():
        setattr(invoice, field, value)


@transaction.atomic
def create_invoice(
    *,
    user,
    party,
    buyer,
    invoice_date,
    items,
    invoice_number: str | None = None,
    invoice_no: str = "",
    due_days: int = 0,
    terms: str = PaymentTerms.DAYS,
    due_date=None,
    currency: str | None = None,
    exchange_rate=None,
    brokerage_rate=None,
    received_brokerage=Decimal('0.00'),
    notes: str = "",
    remarks: str = "",
) -> Invoice:
    """
    Create a pending invoice with its line items.

    Args:
        user: Creator, recorded on the invoice and the activity entry
        party: Seller party
        buyer: Buyer party (must differ from seller)
        invoice_date: Date of the bill
        items: List of dicts with description, quantity and rate
        invoice_number: Explicit number; generated as INV-YYYY-NNNN if omitted
        currency / brokerage_rate: Fall back to system settings when omitted
        due_date: Defaults to invoice_date + due_days

    Returns:
        Created Invoice with items

    Raises:
        SameSellerBuyerError: If party and buyer are the same
        EmptyInvoiceError: If items is empty
        DuplicateInvoiceNumberError: If the explicit number is taken
    """
    if party.pk == buyer.pk:
        raise SameSellerBuyerError()
    if not items:
        raise EmptyInvoiceError()

    default_currency, default_rate = _system_defaults()
    number = invoice_number or next_invoice_number(invoice_date.year)
    if Invoice.objects.filter(invoice_number=number).exists():
        raise DuplicateInvoiceNumberError()

    invoice = Invoice(
        invoice_number=number,
        invoice_no=invoice_no,
        invoice_date=invoice_date,
        due_days=due_days,
        terms=terms,
        due_date=due_date or invoice_date + timedelta(days=due_days),
        currency=currency or default_currency,
        exchange_rate=exchange_rate if exchange_rate is not None else Decimal('1.00'),
        brokerage_rate=brokerage_rate if brokerage_rate is not None else default_rate,
        received_brokerage=received_brokerage or Decimal('0.00'),
        notes=notes,
        remarks=remarks,
        status=InvoiceStatus.PENDING,
        party=party,
        buyer=buyer,
        created_by=user if user and user.is_authenticated else None,
    )
    _apply_figures(invoice, items)

    try:
        with transaction.atomic():
            invoice.save()
    except IntegrityError:
        raise DuplicateInvoiceNumberError()

    InvoiceItem.objects.bulk_create(_build_items(invoice, items))

    log_activity(
        type=ActivityType.INVOICE_CREATED,
        title=f"Invoice {invoice.invoice_number} created",
        description=f"{party.name} to {buyer.name}: {invoice.currency} {invoice.total}",
        user=user,
        party=party,
        invoice=invoice,
    )
    logger.info("Invoice %s created with %d items", invoice.invoice_number, len(items))
    return invoice


@transaction.atomic
def update_invoice(*, invoice_id: UUID, user, items=None, status=None, **changes) -> Invoice:
    """
    Edit an invoice header and optionally replace its items.

    When ``items`` is given, all existing items are deleted and recreated.
    Figures are recomputed from the resulting items either way. A ``status``
    change is delegated to :func:`update_invoice_status`.

    Raises:
        InvoiceNotFoundError: If invoice does not exist
        SameSellerBuyerError: If the edit makes seller and buyer equal
        EmptyInvoiceError: If ``items`` is an empty list
    """
    from .payments import update_invoice_status

    try:
        invoice = Invoice.objects.select_for_update().get(id=invoice_id)
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError()

    if 'due_date' in changes and changes['due_date'] is None:
        del changes['due_date']

    for field in HEADER_FIELDS:
        if field in changes:
            setattr(invoice, field, changes[field])

    if invoice.party_id == invoice.buyer_id:
        raise SameSellerBuyerError()

    # Keep due_date in step with date/days unless the caller set it explicitly
    if 'due_date' not in changes and ('invoice_date' in changes or 'due_days' in changes):
        invoice.due_date = invoice.invoice_date + timedelta(days=invoice.due_days)

    if items is not None:
        if not items:
            raise EmptyInvoiceError()
        invoice.items.all().delete()
        InvoiceItem.objects.bulk_create(_build_items(invoice, items))
        current_items = items
    else:
        current_items = list(invoice.items.values('quantity', 'rate'))

    _apply_figures(invoice, current_items)
    invoice.save()

    log_activity(
        type=ActivityType.INVOICE_UPDATED,
        title=f"Invoice {invoice.invoice_number} updated",
        description=f"Total: {invoice.currency} {invoice.total}",
        user=user,
        party=invoice.party,
        invoice=invoice,
    )

    if status is not None and status != invoice.status:
        invoice = update_invoice_status(invoice_id=invoice.id, status=status, user=user)

    return invoice


@transaction.atomic
def update_invoice_notes(*, invoice_id: UUID, notes: str) -> Invoice:
    updated = Invoice.objects.filter(id=invoice_id).update(notes=notes)
    if not updated:
        raise InvoiceNotFoundError()
    return Invoice.objects.get(id=invoice_id)


@transaction.atomic
def set_invoice_closed(*, invoice_id: UUID, is_closed: bool, user) -> Invoice:
    """
    Flag a bill as closed (settled) or reopen it.

    Independent of the payment status field.
    """
    try:
        invoice = Invoice.objects.select_for_update().get(id=invoice_id)
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError()

    if invoice.is_closed == is_closed:
        return invoice

    invoice.is_closed = is_closed
    invoice.save(update_fields=['is_closed', 'updated_at'])

    log_activity(
        type=ActivityType.INVOICE_CLOSED if is_closed else ActivityType.INVOICE_REOPENED,
        title=f"Invoice {invoice.invoice_number} {'closed' if is_closed else 'reopened'}",
        user=user,
        party=invoice.party,
        invoice=invoice,
    )
    return invoice
