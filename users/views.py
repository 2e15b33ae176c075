# ==================== USERS/VIEWS.PY ====================
import logging

from django.db.models import Count, Prefetch
from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from bookings.models import Booking
from utils.permissions import IsAdmin
from .models import CustomUser
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserProfileSerializer,
    ChangePasswordSerializer,
    RegisteredUserSerializer,
)

logger = logging.getLogger(__name__)


def _token_response(user, message, status_code):
    refresh = RefreshToken.for_user(user)
    refresh['is_admin'] = user.is_staff
    return Response({
        'user': UserProfileSerializer(user).data,
        'refresh': str(refresh),
        'access': str(refresh.access_token),
        'message': message
    }, status=status_code)


class UserViewSet(viewsets.ViewSet):
    """User registration, login, and profile management"""
    permission_classes = [permissions.AllowAny]

    def get_permissions(self):
        if self.action in ('profile', 'change_password'):
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    @action(detail=False, methods=['post'])
    def register(self, request):
        """Register new user"""
        serializer = UserRegistrationSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            return _token_response(user, 'User registered successfully', status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @action(detail=False, methods=['post'])
    def login(self, request):
        """User login"""
        serializer = UserLoginSerializer(data=request.data)
        if serializer.is_valid():
            return _token_response(serializer.validated_data['user'], 'Login successful', status.HTTP_200_OK)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @action(detail=False, methods=['get', 'put'])
    def profile(self, request):
        """Get or update user profile"""
        if request.method == 'GET':
            serializer = UserProfileSerializer(request.user)
            return Response(serializer.data)

        serializer = UserProfileSerializer(request.user, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @action(detail=False, methods=['post'])
    def change_password(self, request):
        """Change own password (users and admins)

        Body: { "current_password": "...", "new_password": "..." }
        """
        serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            request.user.set_password(serializer.validated_data['new_password'])
            request.user.save(update_fields=['password', 'updated_at'])
            logger.info(f"Password changed for {request.user.username}")
            return Response({'message': 'Password updated successfully'}, status=status.HTTP_200_OK)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class RegisteredUserViewSet(viewsets.ReadOnlyModelViewSet):
    """Registered customers and their bookings (admin only)"""
    serializer_class = RegisteredUserSerializer
    permission_classes = [IsAdmin]
    search_fields = ['username', 'email', 'first_name', 'last_name']
    ordering_fields = ['created_at', 'username', 'total_bookings']
    ordering = ['-created_at']

    def get_queryset(self):
        bookings = Booking.objects.select_related('user', 'parking_lot', 'vehicle', 'vehicle__category')
        return (
            CustomUser.objects.filter(is_staff=False)
            .annotate(total_bookings=Count('bookings'))
            .prefetch_related(Prefetch('bookings', queryset=bookings))
        )
