"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import UserRegistrationError, DuplicateUserError
from .user_management import ensure_unique_identity

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    username: str,
    password: str,
    full_name: str = "",
    email: str | None = None,
    mobile: str | None = None,
    address: str = "",
) -> User:
    """
    Register a new self-service account with the default ``user`` role.

    Args:
        username: Login name (unique)
        password: User's password (will be hashed)
        full_name: Optional full name
        email: Optional email (unique when given)
        mobile: Optional mobile number (unique when given)
        address: Optional postal address

    Returns:
        Created User instance

    Raises:
        DuplicateUserError: If username, email or mobile is taken
        UserRegistrationError: If registration fails
    """
    ensure_unique_identity(username=username, email=email, mobile=mobile)

    try:
        user = User.objects.create_user(
            username=username,
            password=password,
            full_name=full_name,
            email=email or None,
            mobile=mobile or None,
            address=address,
        )
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {e}")

    logger.info("Registered user %s", user.username)
    return user
