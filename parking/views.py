# ============================= PARKING VIEWS =============================
import logging

from django.conf import settings
from rest_framework import viewsets, status, permissions, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from utils.distance_calculator import parse_coordinates_param
from utils.exceptions import InvalidLocation
from utils.pagination import StandardResultsPagination
from utils.permissions import IsOwnerRole, IsOwnerOrAdmin, CanManageVehicleCount, is_admin
from .models import ParkingLot
from .serializers import (
    ParkingLotListSerializer,
    ParkingLotDetailSerializer,
    ParkingLotCreateUpdateSerializer,
    VehicleCountUpdateSerializer,
    VehicleCountChangeSerializer,
)
from .filters import ParkingLotFilter
from .services import ParkingSearchService, OccupancyService

logger = logging.getLogger(__name__)


class ParkingLotViewSet(viewsets.ModelViewSet):
    """Parking lot listing, search, creation, and vehicle counts"""

    pagination_class = StandardResultsPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter
    ]
    filterset_class = ParkingLotFilter
    search_fields = ['name', 'street', 'city', 'description']
    ordering_fields = ['created_at', 'name', 'last_updated']
    ordering = ['-created_at']
    http_method_names = ['get', 'post', 'put', 'patch', 'head', 'options']

    def get_queryset(self):
        queryset = ParkingLot.objects.select_related('owner')
        if self.action == 'list':
            return queryset.filter(is_active=True, is_approved=True)
        return queryset

    def get_serializer_class(self):
        if self.action in ['list', 'nearby', 'available', 'mine']:
            return ParkingLotListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return ParkingLotCreateUpdateSerializer
        return ParkingLotDetailSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'nearby', 'available']:
            permission_classes = [permissions.AllowAny]
        elif self.action in ['create', 'mine']:
            permission_classes = [permissions.IsAuthenticated, IsOwnerRole]
        elif self.action in ['update', 'partial_update']:
            permission_classes = [permissions.IsAuthenticated, IsOwnerOrAdmin]
        elif self.action in ['vehicle_count', 'increment_vehicle_count', 'decrement_vehicle_count']:
            permission_classes = [permissions.IsAuthenticated, CanManageVehicleCount]
        else:
            permission_classes = [permissions.IsAuthenticated]
        return [permission() for permission in permission_classes]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        parking = serializer.save()
        logger.info(f"Parking {parking.parking_id} created by {request.user.email}")
        return Response(
            ParkingLotDetailSerializer(parking, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        parking = self.get_object()
        serializer = self.get_serializer(parking, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        parking = serializer.save()
        return Response(ParkingLotDetailSerializer(parking, context={'request': request}).data)

    def _search_params(self, request):
        try:
            longitude, latitude = parse_coordinates_param(request.query_params.get('coordinates'))
        except ValueError as e:
            raise InvalidLocation(str(e))
        try:
            radius = float(request.query_params.get('maxDistance', settings.NEARBY_DEFAULT_DISTANCE_METERS))
        except ValueError:
            raise InvalidLocation('maxDistance must be a number of meters')
        if radius <= 0:
            raise InvalidLocation('maxDistance must be positive')
        return latitude, longitude, radius

    @action(detail=False, methods=['get'])
    def nearby(self, request):
        """Parkings near a point, closest first

        Example: /api/parkings/nearby/?coordinates=77.2090,28.6139&maxDistance=5000
        """
        latitude, longitude, radius = self._search_params(request)
        parkings = ParkingSearchService.nearest_to(latitude, longitude, radius)
        serializer = self.get_serializer(parkings, many=True)
        return Response({'results': serializer.data, 'count': len(parkings)})

    @action(detail=False, methods=['get'])
    def available(self, request):
        """Nearby parkings that are not full"""
        latitude, longitude, radius = self._search_params(request)
        parkings = ParkingSearchService.available_near(latitude, longitude, radius)
        serializer = self.get_serializer(parkings, many=True)
        return Response({'results': serializer.data, 'count': len(parkings)})

    @action(detail=False, methods=['get'])
    def mine(self, request):
        """Get all parkings owned by current user"""
        parkings = ParkingLot.objects.filter(owner=request.user)
        page = self.paginate_queryset(parkings)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @action(detail=True, methods=['put'], url_path='vehicle-count')
    def vehicle_count(self, request, pk=None):
        """Set the vehicle count for one class

        Body: { "vehicle_type": "car|bike|bus_truck", "count": 12 }
        """
        parking = self.get_object()
        serializer = VehicleCountUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        parking = OccupancyService.set_count(
            parking, serializer.validated_data['vehicle_type'], serializer.validated_data['count']
        )
        return Response(parking.occupancy_snapshot(serializer.validated_data['vehicle_type']))

    @action(detail=True, methods=['post'], url_path='vehicle-count/increment')
    def increment_vehicle_count(self, request, pk=None):
        """Vehicle entry

        Body: { "vehicle_type": "car", "increment": 1 }
        """
        parking = self.get_object()
        serializer = VehicleCountChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle_class = serializer.validated_data['vehicle_type']
        parking = OccupancyService.increment(parking, vehicle_class, serializer.validated_data['amount'])
        return Response(parking.occupancy_snapshot(vehicle_class))

    @action(detail=True, methods=['post'], url_path='vehicle-count/decrement')
    def decrement_vehicle_count(self, request, pk=None):
        """Vehicle exit

        Body: { "vehicle_type": "car", "decrement": 1 }
        """
        parking = self.get_object()
        serializer = VehicleCountChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle_class = serializer.validated_data['vehicle_type']
        parking = OccupancyService.decrement(parking, vehicle_class, serializer.validated_data['amount'])
        return Response(parking.occupancy_snapshot(vehicle_class))

    def retrieve(self, request, *args, **kwargs):
        parking = self.get_object()
        if not (parking.is_active and parking.is_approved):
            user = request.user
            if not (user.is_authenticated and (parking.owner_id == user.id or is_admin(user))):
                return Response(
                    {'success': False, 'message': 'Parking not found', 'error': 'not_found'},
                    status=status.HTTP_404_NOT_FOUND
                )
        return Response(self.get_serializer(parking).data)
