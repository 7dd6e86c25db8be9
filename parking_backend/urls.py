# ==================== PARKING_BACKEND/URLS.PY ====================
from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from parking.views import ParkingLotViewSet
from visits.views import VisitViewSet
from parking_requests.views import ParkingRequestViewSet
from utils.views import health

# Create router and register viewsets
router = DefaultRouter()
router.register(r'parkings', ParkingLotViewSet, basename='parking')
router.register(r'visits', VisitViewSet, basename='visit')
router.register(r'requests', ParkingRequestViewSet, basename='request')

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    path('health', health, name='health'),

    path('api/', include([
        # Authentication, profile and wallet
        path('users/', include('users.urls')),

        # API routes
        path('', include(router.urls)),
    ])),
]

handler404 = 'utils.views.not_found'
handler500 = 'utils.views.server_error'
