"""Activity feed writer."""

from .models import Activity


def log_activity(
    *,
    type: str,
    title: str,
    description: str = "",
    user=None,
    party=None,
    invoice=None,
) -> Activity:
    """
    Record an activity entry.

    Callers run inside their own transaction, so the entry commits or
    rolls back together with the change it describes.
    """
    if user is not None and not user.is_authenticated:
        user = None

    return Activity.objects.create(
        type=type,
        title=title,
        description=description,
        user=user,
        party=party,
        invoice=invoice,
    )
