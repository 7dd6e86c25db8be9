# parking/models.py

import uuid

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from users.models import CustomUser

VEHICLE_CLASSES = ('car', 'bike', 'bus_truck')


def generate_parking_id():
    return f"PK-{uuid.uuid4().hex[:10].upper()}"


class ParkingLot(models.Model):
    PARKING_TYPE_CHOICES = (
        ('opensky', 'Open Sky'),
        ('closedsky', 'Covered'),
    )
    PAYMENT_TYPE_CHOICES = (
        ('free', 'Free'),
        ('paid', 'Paid'),
    )
    OWNERSHIP_TYPE_CHOICES = (
        ('private', 'Private'),
        ('public', 'Public'),
    )

    parking_id = models.CharField(max_length=20, unique=True, default=generate_parking_id, editable=False)
    owner = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='owned_parkings')

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    # Location info
    latitude = models.FloatField(validators=[MinValueValidator(-90), MaxValueValidator(90)])
    longitude = models.FloatField(validators=[MinValueValidator(-180), MaxValueValidator(180)])
    street = models.CharField(max_length=200, blank=True)
    city = models.CharField(max_length=100, blank=True, db_index=True)
    state = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)

    parking_type = models.CharField(max_length=20, choices=PARKING_TYPE_CHOICES, default='opensky')
    payment_type = models.CharField(max_length=10, choices=PAYMENT_TYPE_CHOICES, default='free')
    ownership_type = models.CharField(max_length=10, choices=OWNERSHIP_TYPE_CHOICES, default='public')

    # Capacity per vehicle class
    capacity_car = models.PositiveIntegerField(default=0)
    capacity_bike = models.PositiveIntegerField(default=0)
    capacity_bus_truck = models.PositiveIntegerField(default=0)

    # Current occupancy per vehicle class, only changed through parking.services.OccupancyService
    current_car = models.PositiveIntegerField(default=0)
    current_bike = models.PositiveIntegerField(default=0)
    current_bus_truck = models.PositiveIntegerField(default=0)

    # Hourly rate per vehicle class (paid parkings)
    hourly_rate_car = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    hourly_rate_bike = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    hourly_rate_bus_truck = models.DecimalField(max_digits=8, decimal_places=2, default=0)

    is_active = models.BooleanField(default=True, db_index=True)
    is_approved = models.BooleanField(default=True)

    last_updated = models.DateTimeField(auto_now_add=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['latitude', 'longitude'], name='parking_lat_lng_idx'),
            models.Index(fields=['is_active', 'is_approved'], name='parking_active_approved_idx'),
            models.Index(fields=['created_at'], name='parking_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(current_car__lte=models.F('capacity_car')),
                                   name='parking_car_within_capacity'),
            models.CheckConstraint(condition=models.Q(current_bike__lte=models.F('capacity_bike')),
                                   name='parking_bike_within_capacity'),
            models.CheckConstraint(condition=models.Q(current_bus_truck__lte=models.F('capacity_bus_truck')),
                                   name='parking_bus_truck_within_capacity'),
        ]

    def __str__(self):
        return f"{self.name} ({self.parking_id})"

    def capacity_for(self, vehicle_class):
        return getattr(self, f'capacity_{vehicle_class}')

    def count_for(self, vehicle_class):
        return getattr(self, f'current_{vehicle_class}')

    def available_for(self, vehicle_class):
        return max(self.capacity_for(vehicle_class) - self.count_for(vehicle_class), 0)

    @property
    def primary_vehicle_class(self):
        """car, or the first class with capacity when the lot takes no cars"""
        for vehicle_class in VEHICLE_CLASSES:
            if self.capacity_for(vehicle_class) > 0:
                return vehicle_class
        return 'car'

    @property
    def is_full(self):
        vehicle_class = self.primary_vehicle_class
        return self.count_for(vehicle_class) >= self.capacity_for(vehicle_class)

    @property
    def total_capacity(self):
        return sum(self.capacity_for(c) for c in VEHICLE_CLASSES)

    @property
    def occupancy_percentage(self):
        total = self.total_capacity
        if not total:
            return 0
        occupied = sum(self.count_for(c) for c in VEHICLE_CLASSES)
        return round(occupied / total * 100, 2)

    def occupancy_snapshot(self, vehicle_class):
        """Payload broadcast to subscribers when a count changes"""
        return {
            'parking_id': self.pk,
            'public_id': self.parking_id,
            'vehicle_type': vehicle_class,
            'current_count': self.count_for(vehicle_class),
            'capacity': self.capacity_for(vehicle_class),
            'available': self.available_for(vehicle_class),
            'is_full': self.is_full,
            'occupancy_percentage': self.occupancy_percentage,
            'timestamp': self.last_updated.isoformat(),
        }
