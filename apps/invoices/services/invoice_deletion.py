"""
Invoice deletion.

Rows referencing an invoice are removed in a fixed order inside one
transaction: items, activities, transactions, then the invoice itself.
If the ORM path fails with a database error, the same order is replayed
with hand-written SQL.
"""

import logging
from uuid import UUID

from django.db import connection, transaction, DatabaseError

from apps.activities.models import Activity, ActivityType
from apps.activities.services import log_activity
from apps.invoices.models import Invoice, InvoiceItem, Transaction

from .exceptions import InvoiceNotFoundError, InvoiceDeletionError

logger = logging.getLogger(__name__)

# Child tables in deletion order, each with its FK to invoices
DEPENDENT_MODELS = (InvoiceItem, Activity, Transaction)


def _delete_with_orm(invoice_id: UUID) -> None:
    with transaction.atomic():
        InvoiceItem.objects.filter(invoice_id=invoice_id).delete()
        Activity.objects.filter(invoice_id=invoice_id).delete()
        Transaction.objects.filter(invoice_id=invoice_id).delete()
        Invoice.objects.filter(id=invoice_id).delete()


def raw_delete_invoice(invoice_id: UUID) -> bool:
    """
    Delete an invoice and its dependent rows with raw SQL.

    Returns:
        True if the invoice was deleted, False if it did not exist or the
        statements failed (in which case everything is rolled back).
    """
    quote = connection.ops.quote_name
    invoice_table = quote(Invoice._meta.db_table)
    invoice_pk = quote(Invoice._meta.pk.column)
    pk_value = Invoice._meta.pk.get_db_prep_value(invoice_id, connection)

    try:
        with transaction.atomic():
            with connection.cursor() as cursor:
                cursor.execute(
                    f"SELECT 1 FROM {invoice_table} WHERE {invoice_pk} = %s",
                    [pk_value],
                )
                if cursor.fetchone() is None:
                    return False

                for model in DEPENDENT_MODELS:
                    fk_column = quote(model._meta.get_field('invoice').column)
                    cursor.execute(
                        f"DELETE FROM {quote(model._meta.db_table)} WHERE {fk_column} = %s",
                        [pk_value],
                    )

                cursor.execute(
                    f"DELETE FROM {invoice_table} WHERE {invoice_pk} = %s",
                    [pk_value],
                )
    except DatabaseError:
        logger.exception("Raw delete of invoice %s failed and was rolled back", invoice_id)
        return False

    return True


def delete_invoice(*, invoice_id: UUID, user) -> None:
    """
    Delete an invoice with its items, transactions and activity rows.

    Logs an ``invoice_deleted`` activity afterwards; that entry carries the
    invoice number in its title but no foreign key to the deleted row.

    Raises:
        InvoiceNotFoundError: If invoice does not exist
        InvoiceDeletionError: If both the ORM and raw SQL paths fail
    """
    invoice = (
        Invoice.objects
        .select_related('party')
        .filter(id=invoice_id)
        .first()
    )
    if invoice is None:
        raise InvoiceNotFoundError()

    number = invoice.invoice_number
    party = invoice.party

    try:
        _delete_with_orm(invoice_id)
    except DatabaseError as e:
        logger.warning("ORM delete of invoice %s failed (%s); retrying with raw SQL", number, e)
        if not raw_delete_invoice(invoice_id):
            raise InvoiceDeletionError()

    log_activity(
        type=ActivityType.INVOICE_DELETED,
        title=f"Invoice {number} deleted",
        user=user,
        party=party,
    )
    logger.info("Invoice %s deleted", number)
