# ============================= PARKING_REQUESTS/FILTERS.PY =============================
import django_filters
from .models import ParkingRequest


class ParkingRequestFilter(django_filters.FilterSet):
    """Admin filtering for parking requests"""

    created_after = django_filters.IsoDateTimeFilter(
        field_name='created_at',
        lookup_expr='gte',
        label='Created After'
    )
    created_before = django_filters.IsoDateTimeFilter(
        field_name='created_at',
        lookup_expr='lte',
        label='Created Before'
    )

    class Meta:
        model = ParkingRequest
        fields = ['status', 'request_type']
