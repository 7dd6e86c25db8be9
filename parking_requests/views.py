# ============================= PARKING_REQUESTS VIEWS =============================
import logging
from datetime import timedelta

from django.conf import settings
from django.db.models import Count, Sum
from django.utils import timezone
from rest_framework import viewsets, status, permissions, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from utils.distance_calculator import DistanceCalculator, parse_coordinates_param
from utils.exceptions import InvalidLocation, InvalidTransition
from utils.pagination import StandardResultsPagination
from utils.permissions import IsAdmin, IsSubmitterOrAdmin, is_admin
from .filters import ParkingRequestFilter
from .models import ParkingRequest
from .serializers import ParkingRequestSerializer, RequestApprovalSerializer, RequestDenialSerializer
from .services import RequestWorkflowService

logger = logging.getLogger(__name__)


class ParkingRequestViewSet(viewsets.ModelViewSet):
    """Requests for new parking sites and no-parking zones, with admin review"""

    serializer_class = ParkingRequestSerializer
    pagination_class = StandardResultsPagination
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ParkingRequestFilter
    ordering_fields = ['created_at', 'updated_at', 'status']
    ordering = ['-created_at']

    def get_queryset(self):
        return ParkingRequest.objects.select_related('user', 'reviewed_by')

    def get_permissions(self):
        if self.action == 'approved':
            permission_classes = [permissions.AllowAny]
        elif self.action in ['list', 'pending', 'statistics', 'approve', 'deny']:
            permission_classes = [permissions.IsAuthenticated, IsAdmin]
        elif self.action in ['retrieve', 'update', 'partial_update', 'destroy']:
            permission_classes = [permissions.IsAuthenticated, IsSubmitterOrAdmin]
        else:
            permission_classes = [permissions.IsAuthenticated]
        return [permission() for permission in permission_classes]

    def _paginated(self, queryset):
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def perform_create(self, serializer):
        parking_request = serializer.save(user=self.request.user)
        logger.info(
            f"Request {parking_request.pk} ({parking_request.request_type}) submitted by {self.request.user.email}"
        )

    def update(self, request, *args, **kwargs):
        parking_request = self.get_object()
        if not parking_request.is_pending:
            raise InvalidTransition(f'Request has already been {parking_request.status}')
        return super().update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        """Withdraw a request; submitters may only withdraw while it is pending"""
        parking_request = self.get_object()
        if not parking_request.is_pending and not is_admin(request.user):
            raise InvalidTransition(f'Request has already been {parking_request.status}')
        request_id = parking_request.pk
        parking_request.delete()
        logger.info(f"Request {request_id} deleted by {request.user.email}")
        return Response({'success': True, 'message': 'Request deleted'}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'])
    def approved(self, request):
        """Approved requests, visible to everyone"""
        queryset = self.filter_queryset(self.get_queryset().filter(status='approved'))
        return self._paginated(queryset)

    @action(detail=False, methods=['get'])
    def pending(self, request):
        """Requests waiting for review, oldest first"""
        queryset = self.get_queryset().filter(status='pending').order_by('created_at')
        return self._paginated(queryset)

    @action(detail=False, methods=['get'], url_path='user/me')
    def mine(self, request):
        """Requests submitted by the current user

        Optional: ?status=pending|approved|denied
        """
        queryset = self.get_queryset().filter(user=request.user).order_by('-created_at')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return self._paginated(queryset)

    @action(detail=False, methods=['get'])
    def nearby(self, request):
        """Requests near a point, closest first

        Example: /api/requests/nearby/?coordinates=77.2090,28.6139&maxDistance=5000
        """
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

        queryset = self.get_queryset().filter(
            DistanceCalculator.bounding_box_filter(latitude, longitude, radius)
        )
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        requests = DistanceCalculator.nearest(queryset, latitude, longitude, radius)
        serializer = self.get_serializer(requests, many=True)
        return Response({'results': serializer.data, 'count': len(requests)})

    @action(detail=False, methods=['get'])
    def statistics(self, request):
        """Aggregate request counts for the admin dashboard"""
        queryset = ParkingRequest.objects.all()
        by_status = {choice: 0 for choice, _ in ParkingRequest.STATUS_CHOICES}
        for row in queryset.values('status').annotate(count=Count('id')):
            by_status[row['status']] = row['count']
        by_type = {choice: 0 for choice, _ in ParkingRequest.REQUEST_TYPE_CHOICES}
        for row in queryset.values('request_type').annotate(count=Count('id')):
            by_type[row['request_type']] = row['count']

        week_ago = timezone.now() - timedelta(days=7)
        return Response({
            'total': sum(by_status.values()),
            'by_status': by_status,
            'by_type': by_type,
            'total_coins_awarded': queryset.aggregate(total=Sum('coins_awarded'))['total'] or 0,
            'last_7_days': queryset.filter(created_at__gte=week_ago).count(),
        })

    @action(detail=True, methods=['put'])
    def approve(self, request, pk=None):
        """Approve a request (admin only)

        Body: { "coins_awarded": 50, "admin_notes": "..." }
        """
        serializer = RequestApprovalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        parking_request = RequestWorkflowService.approve(
            pk,
            request.user,
            coins_awarded=serializer.validated_data['coins_awarded'],
            admin_notes=serializer.validated_data['admin_notes'],
        )
        return Response({
            'success': True,
            'message': 'Request approved',
            'request': self.get_serializer(parking_request).data,
        })

    @action(detail=True, methods=['put'])
    def deny(self, request, pk=None):
        """Deny a request (admin only)

        Body: { "admin_notes": "..." }
        """
        serializer = RequestDenialSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        parking_request = RequestWorkflowService.deny(
            pk, request.user, admin_notes=serializer.validated_data['admin_notes']
        )
        return Response({
            'success': True,
            'message': 'Request denied',
            'request': self.get_serializer(parking_request).data,
        })
