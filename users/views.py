# ==================== USERS/VIEWS.PY ====================
import logging

from django.contrib.auth.models import update_last_login
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from utils.pagination import StandardResultsPagination
from utils.permissions import IsAdmin
from .models import CustomUser
from .serializers import (UserRegistrationSerializer, UserLoginSerializer, UserProfileSerializer,
                          LogoutSerializer, WalletTransactionSerializer)
from .services import WalletService
from .tokens import get_tokens_for_user

logger = logging.getLogger(__name__)


class UserViewSet(viewsets.ViewSet):
    """User registration, login, profile and wallet"""
    permission_classes = [permissions.AllowAny]

    def get_permissions(self):
        # Routes are mapped by hand in users/urls.py; access is decided here per action
        if self.action in ['register', 'login']:
            permission_classes = [permissions.AllowAny]
        elif self.action == 'deactivate':
            permission_classes = [permissions.IsAuthenticated, IsAdmin]
        else:
            permission_classes = [permissions.IsAuthenticated]
        return [permission() for permission in permission_classes]

    @action(detail=False, methods=['post'])
    def register(self, request):
        """Register new user"""
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"User registered: {user.email}")
        return Response({
            'user': UserProfileSerializer(user).data,
            **get_tokens_for_user(user),
            'message': 'User registered successfully'
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def login(self, request):
        """User login"""
        serializer = UserLoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']
        update_last_login(None, user)
        return Response({
            'user': UserProfileSerializer(user).data,
            **get_tokens_for_user(user),
            'message': 'Login successful'
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'])
    def logout(self, request):
        """Blacklist the refresh token"""
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            RefreshToken(serializer.validated_data['refresh']).blacklist()
        except TokenError as e:
            return Response(
                {'success': False, 'message': str(e), 'error': 'token_not_valid'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response({'message': 'Logged out successfully'})

    @action(detail=False, methods=['get', 'put'])
    def profile(self, request):
        """Get or update user profile"""
        if request.method == 'GET':
            return Response(UserProfileSerializer(request.user).data)

        serializer = UserProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def wallet(self, request):
        """Balance and full ledger, oldest first"""
        transactions = WalletService.history(request.user)
        return Response({
            'coins': WalletService.get_balance(request.user),
            'transactions': WalletTransactionSerializer(transactions, many=True).data,
        })

    @action(detail=False, methods=['get'])
    def wallet_transactions(self, request):
        """Paginated ledger, page/limit select from the oldest-first order"""
        paginator = StandardResultsPagination()
        page = paginator.paginate_queryset(WalletService.history(request.user), request, view=self)
        serializer = WalletTransactionSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @action(detail=True, methods=['post'])
    def deactivate(self, request, pk=None):
        """Soft-deactivate a user (admin only)"""
        user = get_object_or_404(CustomUser, pk=pk)
        if user.is_active:
            user.is_active = False
            user.save(update_fields=['is_active', 'updated_at'])
            logger.info(f"User {user.email} deactivated by {request.user.email}")
        return Response(UserProfileSerializer(user).data)
