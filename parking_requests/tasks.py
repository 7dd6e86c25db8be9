# ==================== PARKING_REQUESTS/TASKS.PY (CELERY TASKS) ====================
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from .models import ParkingRequest
import logging

logger = logging.getLogger(__name__)


@shared_task
def send_request_decision_notification(request_id):
    """Tell the submitter that their request was approved or denied"""
    try:
        parking_request = ParkingRequest.objects.select_related('user', 'created_parking').get(id=request_id)
    except ParkingRequest.DoesNotExist:
        logger.error(f"Request {request_id} not found for decision notification")
        return False

    user = parking_request.user
    lines = [
        f'Your request "{parking_request.title}" has been {parking_request.status}.',
        f'Type: {parking_request.get_request_type_display()}',
    ]
    if parking_request.coins_awarded:
        lines.append(f'Coins awarded: {parking_request.coins_awarded}')
    if parking_request.created_parking:
        lines.append(f'New parking: {parking_request.created_parking.parking_id}')
    if parking_request.admin_notes:
        lines.append(f'Notes: {parking_request.admin_notes}')

    try:
        send_mail(
            f'Request {parking_request.get_status_display()} - {parking_request.title}',
            '\n'.join(lines),
            settings.DEFAULT_FROM_EMAIL,
            [user.email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Error sending decision notification for request {request_id}: {str(e)}")
        return False

    logger.info(f"Decision notification sent for request {request_id} to {user.email}")
    return True
