# ==================== VISITS/SERVICES.PY ====================
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from parking.models import ParkingLot
from users.services import WalletService
from utils.distance_calculator import haversine_meters, validate_coordinates
from utils.exceptions import InvalidLocation, OutOfRange, LotUnavailable, CheckInCooldown
from .models import Visit

logger = logging.getLogger(__name__)


class CheckInService:
    """Geofence verification for check-ins, rewarded through the wallet ledger"""

    @staticmethod
    def verify(parking, latitude, longitude):
        """Raise if a check-in at (latitude, longitude) cannot be accepted; return the distance in meters"""
        if not (parking.is_active and parking.is_approved):
            raise LotUnavailable('Parking is not active')
        if parking.is_full:
            raise LotUnavailable('Parking is full')

        distance = haversine_meters(latitude, longitude, parking.latitude, parking.longitude)
        radius = settings.GEOFENCE_RADIUS_METERS
        if distance > radius:
            raise OutOfRange(
                f'You are {round(distance)}m from the parking; check-ins are accepted within {round(radius)}m'
            )
        return distance

    @staticmethod
    def _lock_user(user):
        return get_user_model().objects.select_for_update().only('pk').get(pk=user.pk)

    @staticmethod
    def _check_cooldown(user, parking):
        minutes = settings.CHECKIN_COOLDOWN_MINUTES
        if not minutes:
            return
        since = timezone.now() - timedelta(minutes=minutes)
        if Visit.objects.filter(user=user, parking=parking, is_verified=True, visit_date__gte=since).exists():
            raise CheckInCooldown(f'You can check in at this parking once every {minutes} minutes')

    @staticmethod
    def check_in(user, parking_id, longitude, latitude):
        """Verify and record a check-in; returns (visit, new_balance)"""
        try:
            longitude, latitude = validate_coordinates(longitude, latitude)
        except ValueError as e:
            raise InvalidLocation(str(e))

        try:
            parking = ParkingLot.objects.get(pk=parking_id)
        except (ParkingLot.DoesNotExist, ValueError, TypeError):
            raise NotFound('Parking not found')

        try:
            distance = CheckInService.verify(parking, latitude, longitude)
        except (LotUnavailable, OutOfRange) as e:
            logger.warning(f"Check-in rejected for user {user.pk} at parking {parking.pk}: {e.detail}")
            raise

        reward = settings.CHECKIN_REWARD_COINS
        with transaction.atomic():
            # Serializes concurrent check-ins by the same user until the Visit row is committed
            CheckInService._lock_user(user)
            try:
                CheckInService._check_cooldown(user, parking)
            except CheckInCooldown as e:
                logger.warning(f"Check-in rejected for user {user.pk} at parking {parking.pk}: {e.detail}")
                raise

            visit = Visit.objects.create(
                user=user,
                parking=parking,
                latitude=latitude,
                longitude=longitude,
                distance=round(distance, 1),
                is_verified=True,
                verification_method='gps',
                coins_earned=reward,
            )
            if reward > 0:
                WalletService.credit(user, reward, f'Check-in at {parking.name}')

            user.latitude = latitude
            user.longitude = longitude
            user.location_updated_at = timezone.now()
            user.save(update_fields=['latitude', 'longitude', 'location_updated_at', 'updated_at'])

        logger.info(f"User {user.pk} checked in at parking {parking.pk} ({round(distance)}m), earned {reward} coins")
        return visit, WalletService.get_balance(user)
