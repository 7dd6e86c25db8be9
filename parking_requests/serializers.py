# ==================== PARKING_REQUESTS/SERIALIZERS.PY ====================
from django.utils import timezone
from rest_framework import serializers
from rest_framework.exceptions import NotFound

from parking.models import ParkingLot
from utils.exceptions import InvalidTransition
from utils.fields import LocationField
from .models import ParkingRequest


class VehicleNumbersSerializer(serializers.Serializer):
    car = serializers.IntegerField(min_value=0, default=0)
    bike = serializers.IntegerField(min_value=0, default=0)
    bus_truck = serializers.IntegerField(min_value=0, default=0)


class HourlyRatesSerializer(serializers.Serializer):
    car = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, default=0, coerce_to_string=False)
    bike = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, default=0, coerce_to_string=False)
    bus_truck = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, default=0,
                                         coerce_to_string=False)


class ParkingDetailsSerializer(serializers.Serializer):
    """Proposed lot for a new-parking-site request"""
    name = serializers.CharField(max_length=200)
    capacity = VehicleNumbersSerializer()
    parking_type = serializers.ChoiceField(choices=ParkingLot.PARKING_TYPE_CHOICES, default='opensky')
    payment_type = serializers.ChoiceField(choices=ParkingLot.PAYMENT_TYPE_CHOICES, default='free')
    ownership_type = serializers.ChoiceField(choices=ParkingLot.OWNERSHIP_TYPE_CHOICES, default='public')
    hourly_rate = HourlyRatesSerializer(required=False)

    def validate_capacity(self, value):
        if not any(value.values()):
            raise serializers.ValidationError('At least one vehicle class needs capacity')
        return value

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        # JSONField storage: keep decimals as strings
        rates = value.get('hourly_rate') or {}
        value['hourly_rate'] = {k: str(rates.get(k, 0)) for k in ('car', 'bike', 'bus_truck')}
        return value

    def to_representation(self, instance):
        return instance or None


class NoParkingDetailsSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_representation(self, instance):
        return instance or None


class ParkingRequestSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.name', read_only=True)
    location = LocationField(source='*')
    parking_details = ParkingDetailsSerializer(required=False, allow_null=True)
    no_parking_details = NoParkingDetailsSerializer(required=False, allow_null=True)
    reviewed_by_name = serializers.CharField(source='reviewed_by.name', read_only=True, allow_null=True)
    created_parking = serializers.PrimaryKeyRelatedField(read_only=True)
    is_pending = serializers.BooleanField(read_only=True)
    age_in_days = serializers.IntegerField(read_only=True)
    distance = serializers.FloatField(read_only=True)

    class Meta:
        model = ParkingRequest
        fields = [
            'id', 'user', 'user_name', 'request_type', 'title', 'description', 'location',
            'parking_details', 'no_parking_details', 'status', 'admin_notes', 'coins_awarded',
            'reviewed_by_name', 'reviewed_at', 'created_parking', 'is_pending', 'age_in_days',
            'distance', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'user', 'user_name', 'status', 'admin_notes', 'coins_awarded', 'reviewed_by_name',
            'reviewed_at', 'created_parking', 'created_at', 'updated_at'
        ]

    def validate(self, data):
        request_type = data.get('request_type', getattr(self.instance, 'request_type', None))
        if self.instance is not None and 'request_type' in data and data['request_type'] != self.instance.request_type:
            raise serializers.ValidationError({'request_type': 'Request type cannot be changed'})

        if request_type == 'new_parking_site':
            details = data.get('parking_details', getattr(self.instance, 'parking_details', None))
            if not details:
                raise serializers.ValidationError(
                    {'parking_details': 'Parking details are required for a new parking site'}
                )
            data['no_parking_details'] = {}
        elif request_type == 'no_parking_zone':
            data['parking_details'] = {}
            if 'no_parking_details' in data and data['no_parking_details'] is None:
                data['no_parking_details'] = {}
        return data

    def update(self, instance, validated_data):
        """Apply a submitter edit only while the request is still pending"""
        validated_data['updated_at'] = timezone.now()
        updated = ParkingRequest.objects.filter(pk=instance.pk, status='pending').update(**validated_data)
        if not updated:
            current = ParkingRequest.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
            if current is None:
                raise NotFound('Request not found')
            raise InvalidTransition(f'Request has already been {current}')
        instance.refresh_from_db()
        return instance


class RequestApprovalSerializer(serializers.Serializer):
    coins_awarded = serializers.IntegerField(min_value=0, default=0)
    admin_notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        # Accept the camelCase keys sent by the web client
        if hasattr(data, 'get'):
            data = {
                'coins_awarded': data.get('coins_awarded', data.get('coinsAwarded', 0)),
                'admin_notes': data.get('admin_notes', data.get('adminNotes', '')),
            }
        return super().to_internal_value(data)


class RequestDenialSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        if hasattr(data, 'get'):
            data = {'admin_notes': data.get('admin_notes', data.get('adminNotes', ''))}
        return super().to_internal_value(data)
