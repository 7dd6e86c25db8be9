# ==================== PARKING/SERVICES.PY ====================
import logging

from django.conf import settings
from django.db.models import F, IntegerField, Value
from django.db.models.functions import Greatest, Least
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from utils.distance_calculator import DistanceCalculator
from utils.exceptions import OccupancyOutOfBounds
from .models import ParkingLot, VEHICLE_CLASSES
from .realtime import broadcast_count_update

logger = logging.getLogger(__name__)


class ParkingSearchService:
    """Nearest-neighbour lookups over parking lots"""

    @staticmethod
    def nearest_to(latitude, longitude, radius_meters, queryset=None):
        """Lots within radius_meters, closest first, each annotated with ``distance`` (m)"""
        if queryset is None:
            queryset = ParkingLot.objects.filter(is_active=True, is_approved=True)
        candidates = queryset.filter(
            DistanceCalculator.bounding_box_filter(latitude, longitude, radius_meters)
        )
        return DistanceCalculator.nearest(candidates, latitude, longitude, radius_meters)

    @staticmethod
    def available_near(latitude, longitude, radius_meters):
        return [
            parking for parking in ParkingSearchService.nearest_to(latitude, longitude, radius_meters)
            if not parking.is_full
        ]


class OccupancyService:
    """Vehicle entry/exit bookkeeping.

    Every change is a single UPDATE so the bounds check and the write cannot
    interleave with another request. In lenient mode (default) counts are
    clamped to [0, capacity]; with OCCUPANCY_STRICT_MODE a change that would
    leave the bounds is rejected instead.
    """

    @staticmethod
    def _validate(vehicle_class, amount=None):
        if vehicle_class not in VEHICLE_CLASSES:
            raise ValidationError({'vehicle_type': f"Must be one of: {', '.join(VEHICLE_CLASSES)}"})
        if amount is not None and (isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0):
            raise ValidationError({'amount': 'Must be a positive integer'})

    @staticmethod
    def _strict():
        return getattr(settings, 'OCCUPANCY_STRICT_MODE', False)

    @staticmethod
    def _finish(parking_pk, vehicle_class):
        parking = ParkingLot.objects.get(pk=parking_pk)
        broadcast_count_update(parking, vehicle_class)
        return parking

    @staticmethod
    def _rows(parking):
        pk = parking.pk if isinstance(parking, ParkingLot) else parking
        rows = ParkingLot.objects.filter(pk=pk)
        if not rows.exists():
            raise NotFound('Parking not found')
        return pk, rows

    @staticmethod
    def increment(parking, vehicle_class, amount=1):
        """Vehicle entry"""
        OccupancyService._validate(vehicle_class, amount)
        pk, rows = OccupancyService._rows(parking)
        current = F(f'current_{vehicle_class}')
        capacity = F(f'capacity_{vehicle_class}')

        if OccupancyService._strict():
            updated = rows.filter(**{f'current_{vehicle_class}__lte': capacity - amount}).update(
                **{f'current_{vehicle_class}': current + amount, 'last_updated': timezone.now()}
            )
            if not updated:
                logger.warning(f"Increment of {vehicle_class} by {amount} rejected for parking {pk}: at capacity")
                raise OccupancyOutOfBounds('Parking does not have enough free spaces')
        else:
            rows.update(**{f'current_{vehicle_class}': Least(current + amount, capacity, output_field=IntegerField()),
                           'last_updated': timezone.now()})

        logger.info(f"Parking {pk}: {vehicle_class} count +{amount}")
        return OccupancyService._finish(pk, vehicle_class)

    @staticmethod
    def decrement(parking, vehicle_class, amount=1):
        """Vehicle exit; lenient mode clamps at zero"""
        OccupancyService._validate(vehicle_class, amount)
        pk, rows = OccupancyService._rows(parking)
        current = F(f'current_{vehicle_class}')

        if OccupancyService._strict():
            updated = rows.filter(**{f'current_{vehicle_class}__gte': amount}).update(
                **{f'current_{vehicle_class}': current - amount, 'last_updated': timezone.now()}
            )
            if not updated:
                logger.warning(f"Decrement of {vehicle_class} by {amount} rejected for parking {pk}: below zero")
                raise OccupancyOutOfBounds('Vehicle count cannot go below zero')
        else:
            rows.update(**{f'current_{vehicle_class}': Greatest(current - amount, Value(0), output_field=IntegerField()),
                           'last_updated': timezone.now()})

        logger.info(f"Parking {pk}: {vehicle_class} count -{amount}")
        return OccupancyService._finish(pk, vehicle_class)

    @staticmethod
    def set_count(parking, vehicle_class, count):
        """Overwrite the count; must already lie within [0, capacity]"""
        OccupancyService._validate(vehicle_class)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError({'count': 'Must be a non-negative integer'})
        pk, rows = OccupancyService._rows(parking)

        updated = rows.filter(**{f'capacity_{vehicle_class}__gte': count}).update(
            **{f'current_{vehicle_class}': count, 'last_updated': timezone.now()}
        )
        if not updated:
            raise ValidationError({'count': 'Count cannot exceed the parking capacity'})

        logger.info(f"Parking {pk}: {vehicle_class} count set to {count}")
        return OccupancyService._finish(pk, vehicle_class)
