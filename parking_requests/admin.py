# ==================== PARKING_REQUESTS/ADMIN.PY ====================
from django.contrib import admin
from .models import ParkingRequest


@admin.register(ParkingRequest)
class ParkingRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'request_type', 'user', 'status', 'coins_awarded', 'reviewed_by', 'created_at']
    list_filter = ['status', 'request_type', 'created_at']
    search_fields = ['title', 'description', 'user__email', 'city']
    # Decisions go through the API so the wallet and the new lot stay consistent
    readonly_fields = ['status', 'coins_awarded', 'reviewed_by', 'reviewed_at', 'created_parking',
                       'created_at', 'updated_at']
