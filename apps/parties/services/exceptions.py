"""
Domain-specific exceptions for parties app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class PartiesServiceError(Exception):
    """Base exception for all parties service errors."""
    pass


class PartyNotFoundError(PartiesServiceError):
    """Raised when a party does not exist."""
    pass


class DuplicatePartyError(PartiesServiceError):
    """Raised when a party with the same name (case-insensitive) exists."""
    pass


class PartyHasRelatedRecordsError(PartiesServiceError):
    """Raised when deleting a party that invoices or transactions reference."""
    pass
