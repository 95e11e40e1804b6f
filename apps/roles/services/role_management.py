"""
Role management service.

Roles are stored by name on ``User.role``; built-in roles resolve from the
catalog even before they are written to the database.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.roles.catalog import ALL_PERMISSIONS, ADMIN_ROLE, SYSTEM_ROLES
from apps.roles.models import Role

from .exceptions import (
    RoleNotFoundError,
    DuplicateRoleError,
    SystemRoleError,
    RoleInUseError,
    UnknownPermissionError,
)

logger = logging.getLogger(__name__)


def get_role_permissions(role_name: str) -> frozenset:
    """
    Resolve the permission ids granted by a role name.

    A stored Role row wins over the built-in default. The admin role
    always resolves to the full catalog. Unknown names grant nothing.
    """
    if role_name == ADMIN_ROLE:
        return ALL_PERMISSIONS

    stored = Role.objects.filter(name=role_name).values_list('permissions', flat=True).first()
    if stored is not None:
        return frozenset(stored)

    default = SYSTEM_ROLES.get(role_name)
    if default:
        return frozenset(default['permissions'])
    return frozenset()


def role_exists(role_name: str) -> bool:
    return role_name in SYSTEM_ROLES or Role.objects.filter(name=role_name).exists()


def _validate_permissions(permissions):
    unknown = sorted(set(permissions) - ALL_PERMISSIONS)
    if unknown:
        raise UnknownPermissionError(f"Unknown permissions: {', '.join(unknown)}")
    return sorted(set(permissions))


def ensure_system_roles() -> list:
    """Create missing built-in roles. Returns the roles that were created."""
    created = []
    for name, definition in SYSTEM_ROLES.items():
        role, was_created = Role.objects.get_or_create(
            name=name,
            defaults={
                'description': definition['description'],
                'permissions': list(definition['permissions']),
                'is_system': True,
            },
        )
        if was_created:
            created.append(role)
    return created


def list_roles():
    ensure_system_roles()
    return Role.objects.all()


@transaction.atomic
def create_role(*, name: str, description: str = "", permissions=()) -> Role:
    """
    Create a custom role.

    Raises:
        DuplicateRoleError: If the name is taken (case-insensitive)
        UnknownPermissionError: If a permission id is not in the catalog
    """
    if name in SYSTEM_ROLES or Role.objects.filter(name__iexact=name).exists():
        raise DuplicateRoleError(f"Role '{name}' already exists")

    role = Role.objects.create(
        name=name,
        description=description,
        permissions=_validate_permissions(permissions),
    )
    logger.info("Created role %s with %d permissions", role.name, len(role.permissions))
    return role


@transaction.atomic
def update_role(*, role_id: UUID, **changes) -> Role:
    """
    Update a role's name, description or permissions.

    Renaming moves every user holding the old name to the new one.

    Raises:
        RoleNotFoundError: If role does not exist
        SystemRoleError: If renaming a built-in role or editing admin permissions
        DuplicateRoleError: If the new name is taken
        UnknownPermissionError: If a permission id is not in the catalog
    """
    from apps.accounts.models import User

    try:
        role = Role.objects.select_for_update().get(id=role_id)
    except Role.DoesNotExist:
        raise RoleNotFoundError("Role not found")

    new_name = changes.get('name')
    if new_name and new_name != role.name:
        if role.is_system:
            raise SystemRoleError("System roles cannot be renamed")
        if new_name in SYSTEM_ROLES or Role.objects.filter(name__iexact=new_name).exclude(id=role.id).exists():
            raise DuplicateRoleError(f"Role '{new_name}' already exists")
        User.objects.filter(role=role.name).update(role=new_name)
        role.name = new_name

    if 'description' in changes:
        role.description = changes['description']

    if 'permissions' in changes:
        if role.name == ADMIN_ROLE:
            raise SystemRoleError("The admin role always has every permission")
        role.permissions = _validate_permissions(changes['permissions'])

    role.save()
    return role


@transaction.atomic
def delete_role(*, role_id: UUID) -> None:
    """
    Delete a custom role.

    Raises:
        RoleNotFoundError: If role does not exist
        SystemRoleError: If role is built-in
        RoleInUseError: If users still hold this role
    """
    try:
        role = Role.objects.select_for_update().get(id=role_id)
    except Role.DoesNotExist:
        raise RoleNotFoundError("Role not found")

    if role.is_system:
        raise SystemRoleError("System roles cannot be deleted")

    assigned = role.user_count
    if assigned:
        raise RoleInUseError(f"Role is assigned to {assigned} user(s)")

    role.delete()
    logger.info("Deleted role %s", role.name)
