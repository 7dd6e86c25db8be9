# ==================== UTILS/DISTANCE_CALCULATOR.PY ====================
import math

from django.db.models import Q
from geopy.distance import geodesic

EARTH_RADIUS_METERS = 6371000.0


def validate_coordinates(longitude, latitude):
    """Return (longitude, latitude) as floats, or raise ValueError"""
    if longitude is None or latitude is None:
        raise ValueError('Longitude and latitude are required')
    if isinstance(longitude, bool) or isinstance(latitude, bool):
        raise ValueError('Coordinates must be numbers')
    try:
        lng = float(longitude)
        lat = float(latitude)
    except (TypeError, ValueError):
        raise ValueError('Coordinates must be numbers')
    if math.isnan(lng) or math.isnan(lat):
        raise ValueError('Coordinates must be numbers')
    if not -180 <= lng <= 180:
        raise ValueError('Longitude must be between -180 and 180')
    if not -90 <= lat <= 90:
        raise ValueError('Latitude must be between -90 and 90')
    return lng, lat


def parse_coordinates_param(value):
    """Parse a ``lng,lat`` query parameter"""
    if not value:
        raise ValueError('coordinates parameter is required (lng,lat)')
    parts = value.split(',')
    if len(parts) != 2:
        raise ValueError('coordinates must be formatted as lng,lat')
    return validate_coordinates(parts[0].strip(), parts[1].strip())


def haversine_meters(lat1, lng1, lat2, lng2):
    """Great-circle distance in meters on a spherical Earth"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


class DistanceCalculator:
    """Distance helpers shared by the registry, check-ins and requests"""

    @staticmethod
    def get_distance_km(lat1, lng1, lat2, lng2):
        """Get ellipsoidal distance in kilometers, for display"""
        return geodesic((lat1, lng1), (lat2, lng2)).km

    @staticmethod
    def get_distance_meters(lat1, lng1, lat2, lng2):
        return haversine_meters(lat1, lng1, lat2, lng2)

    @staticmethod
    def bounding_box(latitude, longitude, radius_meters):
        """Lat/lng box enclosing the circle of ``radius_meters`` around a point.

        Returns (min_lat, max_lat, lng_ranges) where lng_ranges is a list of
        (min_lng, max_lng) tuples; two tuples when the box wraps the antimeridian,
        None when the circle contains a pole and every longitude qualifies.
        """
        angular = radius_meters / EARTH_RADIUS_METERS
        dlat = math.degrees(angular)
        min_lat = max(latitude - dlat, -90.0)
        max_lat = min(latitude + dlat, 90.0)

        if abs(latitude) + dlat >= 90 or angular >= math.pi / 2:
            return min_lat, max_lat, None

        dlng = math.degrees(math.asin(min(1.0, math.sin(angular) / math.cos(math.radians(latitude)))))
        min_lng = longitude - dlng
        max_lng = longitude + dlng

        if min_lng < -180:
            return min_lat, max_lat, [(min_lng + 360, 180.0), (-180.0, max_lng)]
        if max_lng > 180:
            return min_lat, max_lat, [(min_lng, 180.0), (-180.0, max_lng - 360)]
        return min_lat, max_lat, [(min_lng, max_lng)]

    @staticmethod
    def bounding_box_filter(latitude, longitude, radius_meters, lat_field='latitude', lng_field='longitude'):
        """Q object selecting rows inside the bounding box, served by the lat/lng index"""
        min_lat, max_lat, lng_ranges = DistanceCalculator.bounding_box(latitude, longitude, radius_meters)
        query = Q(**{f'{lat_field}__gte': min_lat, f'{lat_field}__lte': max_lat})
        if lng_ranges is None:
            return query

        lng_query = Q()
        for min_lng, max_lng in lng_ranges:
            lng_query |= Q(**{f'{lng_field}__gte': min_lng, f'{lng_field}__lte': max_lng})
        return query & lng_query

    @staticmethod
    def nearest(items, latitude, longitude, radius_meters, key=lambda item: (item.latitude, item.longitude)):
        """Filter ``items`` to those within radius, sorted by distance.

        Each returned item gets a ``distance`` attribute in meters.
        """
        within = []
        for item in items:
            item_lat, item_lng = key(item)
            distance = haversine_meters(latitude, longitude, item_lat, item_lng)
            if distance <= radius_meters:
                item.distance = round(distance, 1)
                within.append(item)
        within.sort(key=lambda item: item.distance)
        return within
