# ==================== PARKING/SERIALIZERS.PY ====================
from django.utils import timezone
from rest_framework import serializers

from utils.distance_calculator import DistanceCalculator
from utils.fields import LocationField
from .models import ParkingLot, VEHICLE_CLASSES


class VehicleCapacitySerializer(serializers.Serializer):
    car = serializers.IntegerField(source='capacity_car', min_value=0, required=False)
    bike = serializers.IntegerField(source='capacity_bike', min_value=0, required=False)
    bus_truck = serializers.IntegerField(source='capacity_bus_truck', min_value=0, required=False)


class VehicleCountSerializer(serializers.Serializer):
    car = serializers.IntegerField(source='current_car', read_only=True)
    bike = serializers.IntegerField(source='current_bike', read_only=True)
    bus_truck = serializers.IntegerField(source='current_bus_truck', read_only=True)


class HourlyRateSerializer(serializers.Serializer):
    car = serializers.DecimalField(source='hourly_rate_car', max_digits=8, decimal_places=2,
                                   min_value=0, required=False)
    bike = serializers.DecimalField(source='hourly_rate_bike', max_digits=8, decimal_places=2,
                                    min_value=0, required=False)
    bus_truck = serializers.DecimalField(source='hourly_rate_bus_truck', max_digits=8, decimal_places=2,
                                         min_value=0, required=False)


class ParkingLotListSerializer(serializers.ModelSerializer):
    """Simplified serializer for listing parking lots"""
    location = LocationField(source='*', read_only=True)
    capacity = VehicleCapacitySerializer(source='*', read_only=True)
    current_count = VehicleCountSerializer(source='*', read_only=True)
    available_spaces = serializers.SerializerMethodField()
    is_full = serializers.BooleanField(read_only=True)
    occupancy_percentage = serializers.FloatField(read_only=True)
    distance = serializers.SerializerMethodField()

    class Meta:
        model = ParkingLot
        fields = ['id', 'parking_id', 'name', 'location', 'parking_type', 'payment_type', 'ownership_type',
                  'capacity', 'current_count', 'available_spaces', 'is_full', 'occupancy_percentage',
                  'distance', 'last_updated']

    def get_available_spaces(self, obj):
        return {vehicle_class: obj.available_for(vehicle_class) for vehicle_class in VEHICLE_CLASSES}

    def get_distance(self, obj):
        """Meters from the searched point; nearby search sets it, plain listings compute it from lat/lng"""
        distance = getattr(obj, 'distance', None)
        if distance is not None:
            return distance

        request = self.context.get('request')
        if request and 'lat' in request.query_params and 'lng' in request.query_params:
            try:
                user_location = (float(request.query_params['lat']), float(request.query_params['lng']))
            except ValueError:
                return None
            km = DistanceCalculator.get_distance_km(user_location[0], user_location[1], obj.latitude, obj.longitude)
            return round(km * 1000, 1)
        return None


class ParkingLotDetailSerializer(ParkingLotListSerializer):
    """Detailed serializer for a parking lot with owner and statistics"""
    hourly_rate = HourlyRateSerializer(source='*', read_only=True)
    owner = serializers.SerializerMethodField()
    statistics = serializers.SerializerMethodField()

    class Meta(ParkingLotListSerializer.Meta):
        fields = ParkingLotListSerializer.Meta.fields + [
            'description', 'hourly_rate', 'owner', 'is_active', 'is_approved', 'statistics', 'created_at'
        ]

    def get_owner(self, obj):
        return {
            'id': obj.owner_id,
            'name': obj.owner.name,
            'email': obj.owner.email,
            'phone_number': str(obj.owner.phone_number),
        }

    def get_statistics(self, obj):
        return {
            'total_visits': obj.visits.filter(is_verified=True).count(),
            'occupancy_percentage': obj.occupancy_percentage,
        }


class ParkingLotCreateUpdateSerializer(serializers.ModelSerializer):
    """For creating/updating parking lots"""
    location = LocationField(source='*')
    capacity = VehicleCapacitySerializer(source='*', required=False)
    hourly_rate = HourlyRateSerializer(source='*', required=False)

    class Meta:
        model = ParkingLot
        fields = ['name', 'description', 'location', 'parking_type', 'payment_type', 'ownership_type',
                  'capacity', 'hourly_rate', 'is_active']

    def validate(self, data):
        if self.instance is not None:
            for vehicle_class in VEHICLE_CLASSES:
                capacity = data.get(f'capacity_{vehicle_class}')
                if capacity is not None and capacity < self.instance.count_for(vehicle_class):
                    raise serializers.ValidationError({
                        'capacity': f'{vehicle_class} capacity cannot be below the current vehicle count'
                    })

        capacities = [data.get(f'capacity_{c}', self.instance.capacity_for(c) if self.instance else 0)
                      for c in VEHICLE_CLASSES]
        if not any(capacities):
            raise serializers.ValidationError({'capacity': 'At least one vehicle class needs capacity'})
        return data

    def create(self, validated_data):
        return ParkingLot.objects.create(owner=self.context['request'].user, **validated_data)

    def update(self, instance, validated_data):
        """Write only the edited columns; current_* counters belong to OccupancyService"""
        bounds = {
            f'current_{c}__lte': validated_data[f'capacity_{c}']
            for c in VEHICLE_CLASSES if f'capacity_{c}' in validated_data
        }
        validated_data['updated_at'] = timezone.now()
        updated = ParkingLot.objects.filter(pk=instance.pk, **bounds).update(**validated_data)
        if not updated:
            # a count moved past the new capacity after validate() read it
            raise serializers.ValidationError({'capacity': 'Capacity cannot be below the current vehicle count'})
        instance.refresh_from_db()
        return instance


class VehicleCountUpdateSerializer(serializers.Serializer):
    vehicle_type = serializers.ChoiceField(choices=VEHICLE_CLASSES)
    count = serializers.IntegerField(min_value=0)


class VehicleCountChangeSerializer(serializers.Serializer):
    vehicle_type = serializers.ChoiceField(choices=VEHICLE_CLASSES)
    amount = serializers.IntegerField(min_value=1, required=False)
    increment = serializers.IntegerField(min_value=1, required=False)
    decrement = serializers.IntegerField(min_value=1, required=False)

    def validate(self, data):
        data['amount'] = data.get('amount') or data.get('increment') or data.get('decrement') or 1
        return data
