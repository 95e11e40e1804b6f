"""Password setup for accounts created by an administrator."""

import logging
from uuid import UUID

from django.db import transaction
from django.contrib.auth import get_user_model

from .exceptions import UserNotFoundError, PasswordAlreadySetError, InactiveAccountError

User = get_user_model()
logger = logging.getLogger(__name__)


def verify_user_for_setup(*, username: str, email: str, mobile: str) -> User:
    """
    Find the account matching all three identifiers.

    Args:
        username: Login name
        email: Registered email (case-insensitive)
        mobile: Registered mobile number

    Returns:
        Matching User instance

    Raises:
        UserNotFoundError: If no account matches all identifiers
    """
    try:
        return User.objects.get(
            username=username,
            email__iexact=email,
            mobile=mobile,
        )
    except User.DoesNotExist:
        raise UserNotFoundError("No account matches the provided details")


@transaction.atomic
def setup_password(*, user_id: UUID, password: str) -> User:
    """
    Set the first password on an account.

    Raises:
        UserNotFoundError: If user does not exist
        InactiveAccountError: If account is deactivated
        PasswordAlreadySetError: If the account already has a usable password
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError("User not found")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")
    if user.has_usable_password():
        raise PasswordAlreadySetError("Password has already been set for this account")

    user.set_password(password)
    user.save(update_fields=['password'])
    logger.info("Password set up for user %s", user.username)
    return user
