# ==================== PARKING_REQUESTS/MODELS.PY ====================
from django.db import models
from django.utils import timezone


class ParkingRequest(models.Model):
    """User proposal for a new parking site or a no-parking zone"""
    STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('denied', 'Denied'),
    )

    REQUEST_TYPE_CHOICES = (
        ('new_parking_site', 'New Parking Site'),
        ('no_parking_zone', 'No Parking Zone'),
    )

    user = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.CASCADE,
        related_name='parking_requests'
    )

    request_type = models.CharField(max_length=20, choices=REQUEST_TYPE_CHOICES)
    title = models.CharField(max_length=200)
    description = models.TextField()

    # Proposed location
    latitude = models.FloatField()
    longitude = models.FloatField()
    street = models.CharField(max_length=200, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)

    # Kind-specific payloads
    parking_details = models.JSONField(default=dict, blank=True)
    no_parking_details = models.JSONField(default=dict, blank=True)

    # Review
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending', db_index=True)
    admin_notes = models.TextField(blank=True)
    coins_awarded = models.PositiveIntegerField(default=0)
    reviewed_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_requests'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_parking = models.OneToOneField(
        'parking.ParkingLot',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='source_request'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='request_status_created_idx'),
            models.Index(fields=['request_type'], name='request_type_idx'),
            models.Index(fields=['user'], name='request_user_idx'),
            models.Index(fields=['latitude', 'longitude'], name='request_lat_lng_idx'),
        ]

    def __str__(self):
        return f"Request {self.id} - {self.request_type} - {self.status}"

    @property
    def is_pending(self):
        return self.status == 'pending'

    @property
    def age_in_days(self):
        return (timezone.now() - self.created_at).days
