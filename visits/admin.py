from django.contrib import admin
from .models import Visit


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ['user', 'parking', 'distance', 'coins_earned', 'is_verified', 'visit_date']
    list_filter = ['is_verified', 'verification_method', 'visit_date']
    search_fields = ['user__email', 'parking__name', 'parking__parking_id']
    readonly_fields = ['user', 'parking', 'latitude', 'longitude', 'distance', 'is_verified',
                       'verification_method', 'coins_earned', 'visit_date']
