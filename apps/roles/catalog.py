"""
Permission catalog.

Permission ids are ``<area>.<action>`` strings. Roles store lists of these
ids; views declare which id they require.
"""

PERMISSION_CATALOG = {
    'dashboard': [
        ('dashboard.view', 'View Dashboard', 'Access the main dashboard'),
        ('dashboard.analytics', 'View Analytics', 'Access brokerage and sales analytics'),
    ],
    'users': [
        ('users.view', 'View Users', 'See the list of user accounts'),
        ('users.create', 'Create Users', 'Add new user accounts'),
        ('users.edit', 'Edit Users', 'Modify user accounts'),
        ('users.delete', 'Delete Users', 'Remove user accounts'),
        ('users.manage_roles', 'Manage User Roles', 'Assign roles to users'),
    ],
    'invoices': [
        ('invoices.view', 'View Invoices', 'See invoices and transactions'),
        ('invoices.create', 'Create Invoices', 'Create new invoices'),
        ('invoices.edit', 'Edit Invoices', 'Modify invoices, notes, status and payments'),
        ('invoices.delete', 'Delete Invoices', 'Remove invoices'),
        ('invoices.close', 'Close Invoices', 'Mark bills as closed or reopen them'),
        ('invoices.export', 'Export Invoices', 'Download invoice data'),
    ],
    'parties': [
        ('parties.view', 'View Parties', 'See party master data'),
        ('parties.create', 'Create Parties', 'Add new parties'),
        ('parties.edit', 'Edit Parties', 'Modify parties'),
        ('parties.delete', 'Delete Parties', 'Remove parties'),
    ],
    'reports': [
        ('reports.view', 'View Reports', 'Open outstanding, closed and sales reports'),
        ('reports.export', 'Export Reports', 'Download reports as CSV, Excel or PDF'),
        ('reports.advanced', 'Advanced Reports', 'Access advanced report options'),
    ],
    'settings': [
        ('settings.view', 'View Settings', 'See system settings'),
        ('settings.edit', 'Edit Settings', 'Change system settings'),
        ('settings.backup', 'Backup Settings', 'Manage backups'),
    ],
    'roles': [
        ('roles.view', 'View Roles', 'See roles and permissions'),
        ('roles.create', 'Create Roles', 'Add custom roles'),
        ('roles.edit', 'Edit Roles', 'Modify roles'),
        ('roles.delete', 'Delete Roles', 'Remove custom roles'),
    ],
}

ALL_PERMISSIONS = frozenset(
    permission_id
    for entries in PERMISSION_CATALOG.values()
    for permission_id, _, _ in entries
)

ADMIN_ROLE = 'admin'
USER_ROLE = 'user'

SYSTEM_ROLES = {
    ADMIN_ROLE: {
        'description': 'Full access to every feature',
        'permissions': sorted(ALL_PERMISSIONS),
    },
    USER_ROLE: {
        'description': 'Day-to-day invoicing and party management',
        'permissions': [
            'dashboard.view',
            'dashboard.analytics',
            'invoices.view',
            'invoices.create',
            'invoices.edit',
            'invoices.close',
            'invoices.export',
            'parties.view',
            'parties.create',
            'parties.edit',
            'reports.view',
            'reports.export',
            'settings.view',
        ],
    },
}


def catalog_as_list():
    """Flatten the catalog into JSON-friendly dicts grouped by category."""
    return [
        {
            'category': category,
            'permissions': [
                {'id': permission_id, 'name': name, 'description': description}
                for permission_id, name, description in entries
            ],
        }
        for category, entries in PERMISSION_CATALOG.items()
    ]
