from django.db import models
from users.models import CustomUser
from parking.models import ParkingLot


class Visit(models.Model):
    """Audit record of an accepted check-in; never edited after creation"""
    VERIFICATION_METHOD_CHOICES = (
        ('gps', 'GPS Proximity'),
    )

    user = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='visits')
    parking = models.ForeignKey(ParkingLot, on_delete=models.CASCADE, related_name='visits')

    # Reported location
    latitude = models.FloatField()
    longitude = models.FloatField()
    distance = models.FloatField(help_text="Meters between the reported location and the parking")

    is_verified = models.BooleanField(default=True)
    verification_method = models.CharField(max_length=20, choices=VERIFICATION_METHOD_CHOICES, default='gps')
    coins_earned = models.PositiveIntegerField(default=0)

    visit_date = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-visit_date']
        indexes = [
            models.Index(fields=['user', 'parking', 'visit_date'], name='visit_user_parking_date_idx'),
            models.Index(fields=['parking', 'visit_date'], name='visit_parking_date_idx'),
        ]

    def __str__(self):
        return f"{self.user.email} @ {self.parking.name} ({self.visit_date:%Y-%m-%d %H:%M})"
