"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class PasswordConfirmationError(AccountsServiceError):
    """Raised when password confirmation fails."""
    pass


class PasswordAlreadySetError(AccountsServiceError):
    """Raised when password setup is attempted on an account that has one."""
    pass


class DuplicateUserError(AccountsServiceError):
    """Raised when username, email or mobile is already taken."""
    pass


class SelfDeletionError(AccountsServiceError):
    """Raised when a user tries to delete their own account via admin tools."""
    pass
