# ==================== PARKING/ADMIN.PY ====================
from django.contrib import admin
from .models import ParkingLot


@admin.register(ParkingLot)
class ParkingLotAdmin(admin.ModelAdmin):
    list_display = ['name', 'parking_id', 'owner', 'city', 'parking_type', 'payment_type',
                    'current_car', 'capacity_car', 'is_active', 'is_approved', 'created_at']
    list_filter = ['parking_type', 'payment_type', 'ownership_type', 'is_active', 'is_approved', 'city']
    search_fields = ['name', 'parking_id', 'street', 'city', 'owner__email']
    readonly_fields = ['parking_id', 'created_at', 'updated_at', 'last_updated']
    fieldsets = (
        ('Basic Info', {'fields': ('parking_id', 'owner', 'name', 'description')}),
        ('Location', {'fields': ('latitude', 'longitude', 'street', 'city', 'state', 'country', 'postal_code')}),
        ('Type', {'fields': ('parking_type', 'payment_type', 'ownership_type')}),
        ('Capacity', {'fields': ('capacity_car', 'capacity_bike', 'capacity_bus_truck')}),
        ('Occupancy', {'fields': ('current_car', 'current_bike', 'current_bus_truck', 'last_updated')}),
        ('Pricing', {'fields': ('hourly_rate_car', 'hourly_rate_bike', 'hourly_rate_bus_truck')}),
        ('Status', {'fields': ('is_active', 'is_approved')}),
        ('Timestamps', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )
