import pytest
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


@pytest.fixture
def user_inactive(db):
    """Create and return a deactivated user."""
    return User.objects.create_user(
        username='inactive',
        password='TestPass123!',
        full_name='Inactive User',
        email='inactive@example.com',
        is_active=False,
    )


@pytest.fixture
def other_user(db):
    """Create and return another default-role user."""
    return User.objects.create_user(
        username='other',
        password='OtherPass123!',
        full_name='Other User',
        email='other@example.com',
        mobile='9123456780',
    )


@pytest.fixture
def pending_setup_user(db):
    """Account created by an administrator without a password."""
    return User.objects.create_user(
        username='newhire',
        password=None,
        full_name='New Hire',
        email='newhire@example.com',
        mobile='9000011111',
    )


@pytest.fixture
def jwt_client(api_client, user):
    """Return an API client authenticated with a JWT access token."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
