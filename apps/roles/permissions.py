"""
Permission classes backed by the role catalog.

Usage with a viewset (per action)::

    class InvoiceViewSet(viewsets.ModelViewSet):
        permission_classes = [HasAppPermission]
        required_permissions = {
            'list': 'invoices.view',
            'create': 'invoices.create',
        }

Usage with a function view (per HTTP method)::

    @api_view(['GET', 'POST'])
    @permission_classes([requires(GET='users.view', POST='users.create')])
    def user_list(request):
        ...
"""

from rest_framework.permissions import BasePermission


class HasAppPermission(BasePermission):
    """
    Require the permission ids a view declares in ``required_permissions``.

    ``required_permissions`` may be a single id, a list of ids, or a dict
    keyed by viewset action (falling back to the HTTP method and then to
    ``'default'``). Unauthenticated requests are rejected so DRF answers 401.
    Requests that match no declared entry are denied, except OPTIONS.
    """

    message = 'You do not have permission to perform this action.'

    def get_required_permissions(self, request, view):
        """Return the permission ids for this request, or None if undeclared."""
        required = getattr(view, 'required_permissions', None)
        if required is None:
            return None
        if isinstance(required, str):
            return [required]
        if isinstance(required, dict):
            action = getattr(view, 'action', None)
            for key in (action, _method(request), 'default'):
                if key in required:
                    value = required[key]
                    return [value] if isinstance(value, str) else list(value)
            return None
        return list(required)

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False

        if request.method == 'OPTIONS':
            return True

        required = self.get_required_permissions(request, view)
        if required is None:
            self.message = 'This action is not available to your role.'
            return False

        granted = user.get_app_permissions()
        missing = [p for p in required if p not in granted]
        if missing:
            self.message = f"Missing permission: {', '.join(missing)}"
            return False
        return True


def _method(request):
    # HEAD is answered by the GET handler
    return 'GET' if request.method == 'HEAD' else request.method


def requires(*permission_ids, **per_method):
    """
    Build a HasAppPermission subclass for function-based views.

    ``requires('reports.view')`` applies to every method;
    ``requires(GET='users.view', POST='users.create')`` picks by method and
    denies any method not listed.
    """

    class RequiredPermission(HasAppPermission):
        def get_required_permissions(self, request, view):
            method = _method(request)
            if method in per_method:
                return [per_method[method]]
            if permission_ids:
                return list(permission_ids)
            return None

    label = ', '.join(list(permission_ids) + list(per_method.values()))
    RequiredPermission.__name__ = f'Requires[{label}]'
    return RequiredPermission
