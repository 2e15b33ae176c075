# ============================= PARKING VIEWS =============================
import logging

from django.db.models.deletion import ProtectedError
from rest_framework import viewsets, status, filters
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from utils.permissions import IsAdminOrReadOnly, IsLotAdmin
from .models import ParkingLot, Category
from .serializers import ParkingLotSerializer, CategorySerializer
from .filters import ParkingLotFilter

logger = logging.getLogger(__name__)


class ParkingLotViewSet(viewsets.ModelViewSet):
    """Parking lot listing and admin management"""

    queryset = ParkingLot.objects.select_related('admin')
    serializer_class = ParkingLotSerializer
    permission_classes = [IsAdminOrReadOnly, IsLotAdmin]
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter
    ]
    filterset_class = ParkingLotFilter
    search_fields = ['location']
    ordering_fields = ['created_at', 'price', 'total_slot', 'booked_slot']
    ordering = ['-created_at']

    def destroy(self, request, *args, **kwargs):
        lot = self.get_object()
        if lot.bookings.exists():
            return Response(
                {'error': 'Cannot delete parking lot with bookings'},
                status=status.HTTP_400_BAD_REQUEST
            )
        try:
            lot.delete()
        except ProtectedError:
            return Response(
                {'error': 'Cannot delete parking lot with bookings'},
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info(f"Parking lot {kwargs.get('pk')} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryViewSet(viewsets.ModelViewSet):
    """Vehicle categories"""

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        try:
            category.delete()
        except ProtectedError:
            return Response(
                {'error': 'Cannot delete category because it is associated with vehicles.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response({'message': 'Category deleted successfully'}, status=status.HTTP_200_OK)
