"""Sequential invoice numbers of the form ``INV-YYYY-NNNN``."""

from django.conf import settings

from apps.invoices.models import Invoice


def invoice_number_prefix(year: int) -> str:
    return f"{settings.INVOICE_NUMBER_PREFIX}-{year}-"


def next_invoice_number(year: int) -> str:
    """
    Return the next free number for ``year``.

    The sequence restarts every year and is at least four digits wide.
    Callers create the invoice in the same transaction; the unique
    constraint on ``invoice_number`` rejects a concurrent duplicate.
    """
    prefix = invoice_number_prefix(year)
    existing = Invoice.objects.filter(
        invoice_number__startswith=prefix
    ).values_list('invoice_number', flat=True)

    highest = 0
    for number in existing:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))

    return f"{prefix}{highest + 1:04d}"
