# ==================== PARKING_REQUESTS/SERVICES.PY ====================
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from parking.models import ParkingLot, VEHICLE_CLASSES
from users.services import WalletService
from utils.exceptions import InvalidTransition
from .models import ParkingRequest
from .tasks import send_request_decision_notification

logger = logging.getLogger(__name__)


class RequestWorkflowService:
    """Admin review of parking requests: pending -> approved | denied"""

    @staticmethod
    def _claim(request_id, new_status, admin, admin_notes, coins_awarded=0):
        """Move a pending request to its final status; one conditional UPDATE"""
        try:
            request_id = int(request_id)
        except (TypeError, ValueError):
            raise NotFound('Request not found')
        updated = ParkingRequest.objects.filter(pk=request_id, status='pending').update(
            status=new_status,
            admin_notes=admin_notes or '',
            coins_awarded=coins_awarded,
            reviewed_by=admin,
            reviewed_at=timezone.now(),
            updated_at=timezone.now(),
        )
        if not updated:
            try:
                current = ParkingRequest.objects.values_list('status', flat=True).get(pk=request_id)
            except ParkingRequest.DoesNotExist:
                raise NotFound('Request not found')
            logger.warning(f"Cannot move request {request_id} from {current} to {new_status}")
            raise InvalidTransition(f'Request has already been {current}')
        return ParkingRequest.objects.select_related('user').get(pk=request_id)

    @staticmethod
    def _rate(rates, vehicle_class):
        try:
            return Decimal(str(rates.get(vehicle_class, 0) or 0))
        except InvalidOperation:
            return Decimal('0')

    @staticmethod
    def _create_parking(parking_request):
        details = parking_request.parking_details or {}
        capacity = details.get('capacity') or {}
        rates = details.get('hourly_rate') or {}

        fields = {}
        for vehicle_class in VEHICLE_CLASSES:
            fields[f'capacity_{vehicle_class}'] = int(capacity.get(vehicle_class, 0) or 0)
            fields[f'hourly_rate_{vehicle_class}'] = RequestWorkflowService._rate(rates, vehicle_class)
        if not any(fields[f'capacity_{c}'] for c in VEHICLE_CLASSES):
            raise ValidationError({'parking_details': 'At least one vehicle class needs capacity'})

        return ParkingLot.objects.create(
            owner=parking_request.user,
            name=details.get('name') or parking_request.title,
            description=parking_request.description,
            latitude=parking_request.latitude,
            longitude=parking_request.longitude,
            street=parking_request.street,
            city=parking_request.city,
            state=parking_request.state,
            country=parking_request.country,
            postal_code=parking_request.postal_code,
            parking_type=details.get('parking_type', 'opensky'),
            payment_type=details.get('payment_type', 'free'),
            ownership_type=details.get('ownership_type', 'public'),
            is_active=True,
            is_approved=True,
            **fields
        )

    @staticmethod
    def approve(request_id, admin, coins_awarded=0, admin_notes=''):
        """Approve a pending request, reward the submitter and promote new sites to parking lots"""
        if isinstance(coins_awarded, bool) or not isinstance(coins_awarded, int) or coins_awarded < 0:
            raise ValidationError({'coins_awarded': 'Coins awarded must be a non-negative integer'})

        with transaction.atomic():
            parking_request = RequestWorkflowService._claim(
                request_id, 'approved', admin, admin_notes, coins_awarded
            )

            if coins_awarded > 0:
                WalletService.credit(
                    parking_request.user,
                    coins_awarded,
                    f'Reward for approved request: {parking_request.title}'
                )

            if parking_request.request_type == 'new_parking_site':
                parking = RequestWorkflowService._create_parking(parking_request)
                parking_request.created_parking = parking
                parking_request.save(update_fields=['created_parking', 'updated_at'])
                logger.info(f"Parking {parking.parking_id} created from request {parking_request.pk}")

            transaction.on_commit(lambda: send_request_decision_notification.delay(parking_request.pk))

        logger.info(
            f"Request {parking_request.pk} approved by {admin.email}, {coins_awarded} coins awarded"
        )
        return parking_request

    @staticmethod
    def deny(request_id, admin, admin_notes=''):
        """Deny a pending request; no wallet effect"""
        with transaction.atomic():
            parking_request = RequestWorkflowService._claim(request_id, 'denied', admin, admin_notes)
            transaction.on_commit(lambda: send_request_decision_notification.delay(parking_request.pk))

        logger.info(f"Request {parking_request.pk} denied by {admin.email}")
        return parking_request
