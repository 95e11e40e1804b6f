"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    PasswordConfirmationError,
    PasswordAlreadySetError,
    DuplicateUserError,
    SelfDeletionError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .user_management import (
    ensure_unique_identity,
    is_identifier_available,
    create_user_by_admin,
    update_user,
    delete_user,
    change_password,
    search_users,
)
from .password_setup import verify_user_for_setup, setup_password

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'PasswordConfirmationError',
    'PasswordAlreadySetError',
    'DuplicateUserError',
    'SelfDeletionError',
    # Services
    'register_user',
    'authenticate_user',
    'ensure_unique_identity',
    'is_identifier_available',
    'create_user_by_admin',
    'update_user',
    'delete_user',
    'change_password',
    'search_users',
    'verify_user_for_setup',
    'setup_password',
]
