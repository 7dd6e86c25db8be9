# ==================== UTILS/EXCEPTION_HANDLER.PY ====================
import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import status, exceptions
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


def _error_code(exc):
    codes = exc.get_codes() if hasattr(exc, 'get_codes') else None
    if isinstance(codes, str):
        return codes
    return getattr(exc, 'default_code', 'error')


def api_exception_handler(exc, context):
    """Render every API error as {success: false, message, error}"""
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(*exc.args)
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied(*exc.args)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {str(exc)}",
                     exc_info=exc)
        set_rollback()
        payload = {
            'success': False,
            'message': 'Internal server error',
            'error': 'server_error',
        }
        if settings.DEBUG:
            payload['detail'] = str(exc)
        return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        response.data = {
            'success': False,
            'message': 'Invalid input data',
            'error': 'validation_error',
            'errors': response.data,
        }
        return response

    detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
    response.data = {
        'success': False,
        'message': str(detail),
        'error': _error_code(exc),
    }
    return response
