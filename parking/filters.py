# ============================= PARKING/FILTERS.PY =============================
import django_filters
from .models import ParkingLot


class ParkingLotFilter(django_filters.FilterSet):
    """Filtering for parking lot listings"""

    city = django_filters.CharFilter(
        field_name='city',
        lookup_expr='icontains',
        label='City'
    )
    max_car_rate = django_filters.NumberFilter(
        field_name='hourly_rate_car',
        lookup_expr='lte',
        label='Maximum Hourly Car Rate'
    )
    min_car_capacity = django_filters.NumberFilter(
        field_name='capacity_car',
        lookup_expr='gte',
        label='Minimum Car Capacity'
    )

    class Meta:
        model = ParkingLot
        fields = ['parking_type', 'payment_type', 'ownership_type', 'city']
