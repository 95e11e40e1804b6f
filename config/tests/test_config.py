import pytest
from unittest.mock import patch
from django.apps import apps as django_apps
from django.db import DatabaseError, IntegrityError
from django.db.models import ProtectedError
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import NotFound
from config.exception_handler import api_exception_handler


# =============================================================================
# Exception Handler
# =============================================================================

class TestApiExceptionHandler:

    CONTEXT = {'view': None}

    def test_drf_exceptions_unchanged(self):
        response = api_exception_handler(NotFound(), self.CONTEXT)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_protected_error_conflict(self):
        response = api_exception_handler(ProtectedError('protected', set()), self.CONTEXT)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'Record is still referenced by other data'

    def test_integrity_error_conflict(self):
        response = api_exception_handler(IntegrityError('UNIQUE constraint failed'), self.CONTEXT)

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_database_error(self):
        response = api_exception_handler(DatabaseError('disk I/O error'), self.CONTEXT)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal server error'}

    def test_other_exceptions_propagate(self):
        assert api_exception_handler(ValueError('boom'), self.CONTEXT) is None


# =============================================================================
# Health Check
# =============================================================================

@pytest.mark.django_db
class TestHealthCheck:
    """Tests for GET /api/health/"""

    def test_healthy(self, api_client):
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'status': 'ok', 'database': 'ok'}

    def test_database_unreachable(self, api_client):
        with patch('config.views.connection.cursor', side_effect=DatabaseError('gone')):
            response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()['status'] == 'unhealthy'


# =============================================================================
# Project Layout
# =============================================================================

class TestInstalledApps:

    @pytest.mark.parametrize('label', ['accounts', 'roles', 'parties', 'invoices', 'activities', 'analytics', 'system'])
    def test_app_registered(self, label):
        app_config = django_apps.get_app_config(label)

        assert app_config.name == f'apps.{label}'
