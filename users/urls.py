from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import UserViewSet

urlpatterns = [
    path('register/', UserViewSet.as_view({'post': 'register'}), name='register'),
    path('login/', UserViewSet.as_view({'post': 'login'}), name='login'),
    path('logout/', UserViewSet.as_view({'post': 'logout'}), name='logout'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('profile/', UserViewSet.as_view({'get': 'profile', 'put': 'profile'}), name='profile'),
    path('wallet/', UserViewSet.as_view({'get': 'wallet'}), name='wallet'),
    path('wallet/transactions/', UserViewSet.as_view({'get': 'wallet_transactions'}),
         name='wallet_transactions'),
    path('<int:pk>/deactivate/', UserViewSet.as_view({'post': 'deactivate'}), name='deactivate_user'),
]
