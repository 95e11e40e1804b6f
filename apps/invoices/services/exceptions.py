"""
Domain exceptions for invoices app.

Service functions raise these directly; they are DRF APIExceptions, so
views do not need to translate them.
"""
from rest_framework.exceptions import APIException


class InvoiceNotFoundError(APIException):
    """Invoice does not exist."""
    status_code = 404
    default_detail = 'Invoice not found.'
    default_code = 'invoice_not_found'


class SameSellerBuyerError(APIException):
    """Seller and buyer are the same party."""
    status_code = 400
    default_detail = 'Seller and buyer must be different parties.'
    default_code = 'same_seller_buyer'


class EmptyInvoiceError(APIException):
    """Invoice has no line items."""
    status_code = 400
    default_detail = 'An invoice needs at least one line item.'
    default_code = 'empty_invoice'


class DuplicateInvoiceNumberError(APIException):
    """Invoice number already used."""
    status_code = 409
    default_detail = 'An invoice with this number already exists.'
    default_code = 'duplicate_invoice_number'


class InvalidStatusError(APIException):
    """Status value outside pending/paid/cancelled."""
    status_code = 400
    default_detail = 'Status must be one of: pending, paid, cancelled.'
    default_code = 'invalid_status'


class InvalidStatusTransitionError(APIException):
    """Paid invoices cannot move back to another status."""
    status_code = 400
    default_detail = 'A paid invoice cannot change status.'
    default_code = 'invalid_status_transition'


class TransactionValidationError(APIException):
    """Transaction does not fit the referenced invoice."""
    status_code = 400
    default_detail = 'The transaction party must be the seller or buyer of the invoice.'
    default_code = 'invalid_transaction'


class InvoiceDeletionError(APIException):
    """Both delete paths failed."""
    status_code = 500
    default_detail = 'Failed to delete the invoice.'
    default_code = 'invoice_deletion_failed'
