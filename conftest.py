import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from apps.accounts.models import User
from apps.invoices.services import create_invoice
from apps.parties.models import Party
from apps.roles.models import Role


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return a user holding the admin role."""
    return User.objects.create_user(
        username='admin',
        password='AdminPass123!',
        full_name='Admin User',
        email='admin@example.com',
        role='admin',
    )


@pytest.fixture
def user(db):
    """Create and return a user with the default role."""
    return User.objects.create_user(
        username='operator',
        password='TestPass123!',
        full_name='Test Operator',
        email='operator@example.com',
        mobile='9876543210',
    )


@pytest.fixture
def viewer_role(db):
    """Custom role that can only look at the dashboard, invoices and parties."""
    return Role.objects.create(
        name='viewer',
        description='Read-only access',
        permissions=['dashboard.view', 'invoices.view', 'parties.view'],
    )


@pytest.fixture
def viewer(db, viewer_role):
    """Create and return a user holding the viewer role."""
    return User.objects.create_user(
        username='viewer',
        password='ViewPass123!',
        full_name='Read Only',
        email='viewer@example.com',
        role=viewer_role.name,
    )


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an API client authenticated as the default-role user."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def viewer_client(viewer):
    client = APIClient()
    client.force_authenticate(user=viewer)
    return client


@pytest.fixture
def seller(db):
    """Create and return the selling party."""
    return Party.objects.create(
        name='Sharma Traders',
        contact_person='Rakesh Sharma',
        phone='9811122233',
        email='accounts@sharmatraders.in',
    )


@pytest.fixture
def buyer(db):
    """Create and return the buying party."""
    return Party.objects.create(
        name='Gupta Exports',
        contact_person='Anita Gupta',
        phone='9822233344',
    )


@pytest.fixture
def make_invoice(db, user, seller, buyer):
    """
    Factory for invoices created through the service layer.

    Defaults to one line of 10 x 150.00 INR at 0.75% brokerage.
    """
    def _make(**overrides):
        data = {
            'user': user,
            'party': seller,
            'buyer': buyer,
            'invoice_date': date(2025, 3, 10),
            'due_days': 30,
            'currency': 'INR',
            'brokerage_rate': Decimal('0.75'),
            'items': [{'description': 'Cotton bales', 'quantity': 10, 'rate': Decimal('150.00')}],
        }
        data.update(overrides)
        return create_invoice(**data)

    return _make


@pytest.fixture
def invoice(make_invoice):
    """Create and return a pending INR invoice."""
    return make_invoice()
