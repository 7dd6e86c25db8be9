from rest_framework import serializers

from .models import Visit


class VisitParkingSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    parking_id = serializers.CharField()
    name = serializers.CharField()
    parking_type = serializers.CharField()
    payment_type = serializers.CharField()


class VisitSerializer(serializers.ModelSerializer):
    parking = VisitParkingSerializer(read_only=True)
    location = serializers.SerializerMethodField()

    class Meta:
        model = Visit
        fields = ['id', 'parking', 'location', 'distance', 'coins_earned', 'is_verified',
                  'verification_method', 'visit_date']
        read_only_fields = fields

    def get_location(self, obj):
        return {'type': 'Point', 'coordinates': [obj.longitude, obj.latitude]}


class CheckInSerializer(serializers.Serializer):
    """Only shape checks; coordinate validation raises InvalidLocation in the service"""
    parking_id = serializers.IntegerField()
    location = serializers.DictField(required=False)
    longitude = serializers.JSONField(required=False)
    latitude = serializers.JSONField(required=False)
