from django.db import models
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from phonenumber_field.modelfields import PhoneNumberField


class CustomUser(AbstractUser):
    ROLE_CHOICES = (
        ('admin', 'Administrator'),
        ('owner', 'Parking Owner'),
        ('staff', 'Parking Staff'),
        ('user', 'Regular User'),
    )

    name = models.CharField(max_length=50)
    email = models.EmailField(unique=True)
    phone_number = PhoneNumberField(unique=True, blank=False)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user', db_index=True)

    # Wallet balance, only changed through users.services.WalletService
    coins = models.PositiveIntegerField(default=0)

    # Last known location
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    location_updated_at = models.DateTimeField(null=True, blank=True)

    staff_parking = models.ForeignKey(
        'parking.ParkingLot',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='staff_members'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'name', 'phone_number']

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(coins__gte=0), name='user_coins_non_negative'),
        ]

    def __str__(self):
        return f"{self.email} ({self.get_role_display()})"


class WalletTransaction(models.Model):
    """Append-only wallet ledger entry"""
    TRANSACTION_TYPE_CHOICES = (
        ('credit', 'Credit'),
        ('debit', 'Debit'),
    )

    user = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='wallet_transactions')
    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPE_CHOICES)
    amount = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    description = models.CharField(max_length=255)
    balance_after = models.PositiveIntegerField()
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['timestamp', 'id']
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='wallet_user_ts_idx'),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.transaction_type} {self.amount}"
