"""Services for invoices business logic."""

from .exceptions import (
    InvoiceNotFoundError,
    SameSellerBuyerError,
    EmptyInvoiceError,
    DuplicateInvoiceNumberError,
    InvalidStatusError,
    InvalidStatusTransitionError,
    TransactionValidationError,
    InvoiceDeletionError,
)
from .brokerage import calculate_invoice_figures, quantize_money, effective_exchange_rate
from .numbering import next_invoice_number
from .invoice_management import (
    create_invoice,
    update_invoice,
    update_invoice_notes,
    set_invoice_closed,
)
from .payments import update_invoice_status, record_transaction
from .invoice_deletion import delete_invoice, raw_delete_invoice

__all__ = [
    # Exceptions
    'InvoiceNotFoundError',
    'SameSellerBuyerError',
    'EmptyInvoiceError',
    'DuplicateInvoiceNumberError',
    'InvalidStatusError',
    'InvalidStatusTransitionError',
    'TransactionValidationError',
    'InvoiceDeletionError',
    # Services
    'calculate_invoice_figures',
    'quantize_money',
    'effective_exchange_rate',
    'next_invoice_number',
    'create_invoice',
    'update_invoice',
    'update_invoice_notes',
    'set_invoice_closed',
    'update_invoice_status',
    'record_transaction',
    'delete_invoice',
    'raw_delete_invoice',
]
