# ==================== UTILS/VIEWS.PY ====================
import logging

from django.conf import settings
from django.db import connection
from django.db.utils import OperationalError
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)


def health(request):
    """Liveness plus database connectivity"""
    try:
        connection.ensure_connection()
        database = 'connected'
    except OperationalError as e:
        logger.error(f"Health check could not reach the database: {str(e)}")
        database = 'disconnected'

    return JsonResponse({
        'success': database == 'connected',
        'message': 'Server is running',
        'timestamp': timezone.now().isoformat(),
        'environment': 'development' if settings.DEBUG else 'production',
        'database': database,
    }, status=200 if database == 'connected' else 503)


def not_found(request, exception=None):
    return JsonResponse({
        'success': False,
        'message': f'Route {request.path} not found',
        'error': 'not_found',
    }, status=404)


def server_error(request):
    return JsonResponse({
        'success': False,
        'message': 'Internal server error',
        'error': 'server_error',
    }, status=500)
