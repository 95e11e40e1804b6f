"""Services for roles business logic."""

from .exceptions import (
    RolesServiceError,
    RoleNotFoundError,
    DuplicateRoleError,
    SystemRoleError,
    RoleInUseError,
    UnknownPermissionError,
)
from .role_management import (
    get_role_permissions,
    role_exists,
    ensure_system_roles,
    list_roles,
    create_role,
    update_role,
    delete_role,
)

__all__ = [
    # Exceptions
    'RolesServiceError',
    'RoleNotFoundError',
    'DuplicateRoleError',
    'SystemRoleError',
    'RoleInUseError',
    'UnknownPermissionError',
    # Services
    'get_role_permissions',
    'role_exists',
    'ensure_system_roles',
    'list_roles',
    'create_role',
    'update_role',
    'delete_role',
]
