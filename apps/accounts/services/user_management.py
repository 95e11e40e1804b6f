"""User administration services (admin-side create/update/delete)."""

import logging
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.contrib.auth import get_user_model

from .exceptions import (
    DuplicateUserError,
    UserNotFoundError,
    SelfDeletionError,
    PasswordConfirmationError,
)

User = get_user_model()
logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('full_name', 'email', 'mobile', 'address', 'role', 'is_active')


def ensure_unique_identity(*, username=None, email=None, mobile=None, exclude_id=None):
    """
    Raise DuplicateUserError if any of the given identifiers is taken.

    Username comparison is case-insensitive; email is compared
    case-insensitively as well, mobile exactly.
    """
    queryset = User.objects.all()
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)

    if username and queryset.filter(username__iexact=username).exists():
        raise DuplicateUserError("Username already exists")
    if email and queryset.filter(email__iexact=email).exists():
        raise DuplicateUserError("Email already registered")
    if mobile and queryset.filter(mobile=mobile).exists():
        raise DuplicateUserError("Mobile number already registered")


def is_identifier_available(*, field: str, value: str, exclude_id=None) -> bool:
    """Check whether ``username``/``email``/``mobile`` is still free."""
    lookup = {
        'username': 'username__iexact',
        'email': 'email__iexact',
        'mobile': 'mobile',
    }[field]
    queryset = User.objects.filter(**{lookup: value})
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    return not queryset.exists()


@transaction.atomic
def create_user_by_admin(
    *,
    username: str,
    full_name: str = "",
    email: str | None = None,
    mobile: str | None = None,
    address: str = "",
    role: str = "user",
    is_active: bool = True,
    password: str | None = None,
) -> User:
    """
    Create an account on behalf of someone else.

    When ``password`` is omitted the account gets an unusable password and
    the owner completes it through the verify-user / setup-password flow.

    Raises:
        DuplicateUserError: If username, email or mobile is taken
    """
    ensure_unique_identity(username=username, email=email, mobile=mobile)

    user = User.objects.create_user(
        username=username,
        password=password,
        full_name=full_name,
        email=email or None,
        mobile=mobile or None,
        address=address,
        role=role,
        is_active=is_active,
    )
    logger.info("Admin created user %s with role %s", user.username, user.role)
    return user


@transaction.atomic
def update_user(*, user_id: UUID, **changes) -> User:
    """
    Update profile, role or status fields of a user.

    Raises:
        UserNotFoundError: If user does not exist
        DuplicateUserError: If email or mobile collides with another account
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError("User not found")

    ensure_unique_identity(
        email=changes.get('email'),
        mobile=changes.get('mobile'),
        exclude_id=user.id,
    )

    update_fields = []
    for field in UPDATABLE_FIELDS:
        if field in changes:
            value = changes[field]
            if field in ('email', 'mobile'):
                value = value or None
            setattr(user, field, value)
            update_fields.append(field)

    if update_fields:
        user.save(update_fields=update_fields + ['updated_at'])
    return user


@transaction.atomic
def delete_user(*, user_id: UUID, acting_user) -> None:
    """
    Delete a user account.

    Raises:
        UserNotFoundError: If user does not exist
        SelfDeletionError: If the acting user targets their own account
    """
    if str(user_id) == str(acting_user.id):
        raise SelfDeletionError("You cannot delete your own account")

    deleted, _ = User.objects.filter(id=user_id).delete()
    if not deleted:
        raise UserNotFoundError("User not found")
    logger.info("User %s deleted by %s", user_id, acting_user.username)


@transaction.atomic
def change_password(*, user, current_password: str, new_password: str) -> None:
    """
    Change the password of an authenticated user.

    Raises:
        PasswordConfirmationError: If current password is wrong
    """
    if not user.check_password(current_password):
        raise PasswordConfirmationError("Current password is incorrect")
    user.set_password(new_password)
    user.save(update_fields=['password'])


def search_users(*, role=None, is_active=None, search=None):
    """Return a filtered user queryset for the admin listing."""
    queryset = User.objects.all()
    if role:
        queryset = queryset.filter(role=role)
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if search:
        queryset = queryset.filter(
            Q(username__icontains=search) |
            Q(full_name__icontains=search) |
            Q(email__icontains=search) |
            Q(mobile__icontains=search)
        )
    return queryset
