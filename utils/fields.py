# ==================== UTILS/FIELDS.PY ====================
from rest_framework import serializers

from .distance_calculator import validate_coordinates

ADDRESS_FIELDS = ('street', 'city', 'state', 'country', 'postal_code')


def extract_coordinates(data):
    """Pull (longitude, latitude) from a GeoJSON-style point or flat lng/lat keys"""
    if not isinstance(data, dict):
        raise ValueError('Location must be an object')
    coordinates = data.get('coordinates')
    if coordinates is not None:
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
            raise ValueError('coordinates must be [longitude, latitude]')
        return validate_coordinates(coordinates[0], coordinates[1])
    return validate_coordinates(data.get('longitude'), data.get('latitude'))


class LocationField(serializers.Field):
    """GeoJSON point plus postal address, stored in flat latitude/longitude/address columns.

    Use with ``source='*'``.
    """

    def __init__(self, with_address=True, **kwargs):
        self.with_address = with_address
        super().__init__(**kwargs)

    def to_representation(self, instance):
        location = {
            'type': 'Point',
            'coordinates': [instance.longitude, instance.latitude],
        }
        if self.with_address:
            location['address'] = {name: getattr(instance, name) for name in ADDRESS_FIELDS}
        return location

    def to_internal_value(self, data):
        try:
            longitude, latitude = extract_coordinates(data)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

        result = {'latitude': latitude, 'longitude': longitude}
        if self.with_address:
            address = data.get('address') or {}
            if not isinstance(address, dict):
                raise serializers.ValidationError('address must be an object')
            for name in ADDRESS_FIELDS:
                if name in address:
                    result[name] = str(address[name] or '')
        return result
