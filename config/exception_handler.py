"""
DRF exception handler.

Extends the stock handler so database-level failures that escape the
service layer still reach the client as JSON instead of an HTML 500 page.
"""
import logging

from django.db import DatabaseError, IntegrityError
from django.db.models import ProtectedError, RestrictedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Translate ORM constraint errors to 409 and other DB errors to 500."""
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, (ProtectedError, RestrictedError)):
        return Response({
            'error': 'Record is still referenced by other data',
            'message': 'Remove the related records first, then try again.',
        }, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, IntegrityError):
        logger.warning('Integrity error in %s: %s', context.get('view').__class__.__name__, exc)
        return Response({
            'error': 'Conflicting data',
            'message': 'The change conflicts with existing records.',
        }, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, DatabaseError):
        logger.exception('Unexpected database error')
        return Response({
            'error': 'Internal server error',
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return None
