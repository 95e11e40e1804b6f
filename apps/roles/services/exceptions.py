"""
Domain-specific exceptions for roles app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class RolesServiceError(Exception):
    """Base exception for all roles service errors."""
    pass


class RoleNotFoundError(RolesServiceError):
    """Raised when a role does not exist."""
    pass


class DuplicateRoleError(RolesServiceError):
    """Raised when a role name is already used."""
    pass


class SystemRoleError(RolesServiceError):
    """Raised when renaming or deleting a built-in role."""
    pass


class RoleInUseError(RolesServiceError):
    """Raised when deleting a role still assigned to users."""
    pass


class UnknownPermissionError(RolesServiceError):
    """Raised when a permission id is not in the catalog."""
    pass
