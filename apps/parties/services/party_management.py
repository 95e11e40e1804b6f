"""
Party management service.

Create, update and guarded delete of parties, each recorded in the
activity feed.
"""

import logging
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import ProtectedError

from apps.activities.models import ActivityType
from apps.activities.services import log_activity
from apps.parties.models import Party

from .exceptions import (
    PartyNotFoundError,
    DuplicatePartyError,
    PartyHasRelatedRecordsError,
)
from .party_matching import is_party_name_available

logger = logging.getLogger(__name__)

PARTY_FIELDS = ('name', 'contact_person', 'phone', 'email', 'address', 'gstin', 'notes')


@transaction.atomic
def create_party(*, user, name: str, **fields) -> Party:
    """
    Create a party and log ``party_added``.

    Raises:
        DuplicatePartyError: If the name is already used (case-insensitive)
    """
    name = name.strip()
    if not is_party_name_available(name=name):
        raise DuplicatePartyError(f"A party named '{name}' already exists")

    party = Party.objects.create(
        name=name,
        **{k: v for k, v in fields.items() if k in PARTY_FIELDS},
    )
    log_activity(
        type=ActivityType.PARTY_ADDED,
        title=f"New party added: {party.name}",
        description=f"Contact: {party.contact_person}" if party.contact_person else "",
        user=user,
        party=party,
    )
    logger.info("Party %s created", party.id)
    return party


@transaction.atomic
def update_party(*, party_id: UUID, user, **changes) -> Party:
    """
    Update party fields and log ``party_updated``.

    Raises:
        PartyNotFoundError: If party does not exist
        DuplicatePartyError: If renaming to a name already in use
    """
    try:
        party = Party.objects.select_for_update().get(id=party_id)
    except Party.DoesNotExist:
        raise PartyNotFoundError("Party not found")

    if 'name' in changes:
        changes['name'] = changes['name'].strip()
        if not is_party_name_available(name=changes['name'], exclude_id=party.id):
            raise DuplicatePartyError(f"A party named '{changes['name']}' already exists")

    changed = [field for field in PARTY_FIELDS if field in changes and getattr(party, field) != changes[field]]
    for field in changed:
        setattr(party, field, changes[field])

    if changed:
        party.save(update_fields=changed + ['updated_at'])
        log_activity(
            type=ActivityType.PARTY_UPDATED,
            title=f"Party updated: {party.name}",
            description=f"Changed: {', '.join(changed)}",
            user=user,
            party=party,
        )
    return party


def delete_party(*, party_id: UUID, user) -> None:
    """
    Delete a party that no invoice or transaction references.

    Raises:
        PartyNotFoundError: If party does not exist
        PartyHasRelatedRecordsError: If invoices or transactions reference the party
    """
    try:
        with transaction.atomic():
            try:
                party = Party.objects.select_for_update().get(id=party_id)
            except Party.DoesNotExist:
                raise PartyNotFoundError("Party not found")

            if party.has_related_records():
                raise PartyHasRelatedRecordsError(
                    "Cannot delete a party that has invoices or transactions. "
                    "Delete or reassign them first."
                )

            name = party.name
            party.delete()
            log_activity(
                type=ActivityType.PARTY_DELETED,
                title=f"Party deleted: {name}",
                user=user,
            )
    except (ProtectedError, IntegrityError) as e:
        # Rows created between the check and the delete
        logger.warning("Party %s delete blocked by constraint: %s", party_id, e)
        raise PartyHasRelatedRecordsError(
            "Cannot delete a party that has invoices or transactions. "
            "Delete or reassign them first."
        )

    logger.info("Party %s deleted", party_id)
