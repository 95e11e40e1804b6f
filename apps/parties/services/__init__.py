"""Services for parties business logic."""

from .exceptions import (
    PartiesServiceError,
    PartyNotFoundError,
    DuplicatePartyError,
    PartyHasRelatedRecordsError,
)
from .party_management import create_party, update_party, delete_party
from .party_matching import (
    normalize_name,
    is_party_name_available,
    find_similar_parties,
)

__all__ = [
    # Exceptions
    'PartiesServiceError',
    'PartyNotFoundError',
    'DuplicatePartyError',
    'PartyHasRelatedRecordsError',
    # Services
    'create_party',
    'update_party',
    'delete_party',
    'normalize_name',
    'is_party_name_available',
    'find_similar_parties',
]
