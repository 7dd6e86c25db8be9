# ==================== VISITS/VIEWS.PY ====================
from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response

from utils.exceptions import InvalidLocation
from utils.fields import extract_coordinates
from utils.pagination import StandardResultsPagination
from .models import Visit
from .serializers import VisitSerializer, CheckInSerializer
from .services import CheckInService


class VisitViewSet(viewsets.ViewSet):
    """GPS check-ins"""
    permission_classes = [permissions.IsAuthenticated]

    def create(self, request):
        """Check in at a parking

        Body: {
            "parking_id": 1,
            "location": {"type": "Point", "coordinates": [77.2090, 28.6139]}
        }
        """
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            longitude, latitude = extract_coordinates(data.get('location') or data)
        except ValueError as e:
            raise InvalidLocation(str(e))

        visit, balance = CheckInService.check_in(request.user, data['parking_id'], longitude, latitude)
        return Response({
            'visit': VisitSerializer(visit).data,
            'coins': balance,
            'message': f'Checked in successfully. You earned {visit.coins_earned} coins.'
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path='user/me')
    def my_visits(self, request):
        """Visits of the current user, newest first"""
        visits = Visit.objects.filter(user=request.user).select_related('parking')
        paginator = StandardResultsPagination()
        page = paginator.paginate_queryset(visits, request, view=self)
        return paginator.get_paginated_response(VisitSerializer(page, many=True).data)
