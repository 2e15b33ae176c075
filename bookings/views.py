# ============================= BOOKINGS VIEWS =============================
import logging

from django.conf import settings
from rest_framework import viewsets, mixins, status, permissions, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from utils.permissions import IsAdmin
from . import lifecycle
from .filters import VehicleFilter
from .models import Booking, Vehicle
from .serializers import (
    AdminBookingCreateSerializer,
    BookingSerializer,
    SettleVehicleSerializer,
    VehicleSerializer,
)
from .services import BookingService

logger = logging.getLogger(__name__)


class BookingViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """Bookings: users see their own, admins see all and enter walk-in bookings"""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter
    ]
    filterset_fields = ['parking_lot', 'vehicle__status']
    search_fields = ['parking_lot__location', 'vehicle__registration_number', 'payment_id']
    ordering_fields = ['created_at', 'vehicle__in_time']
    ordering = ['-created_at']

    def get_queryset(self):
        queryset = Booking.objects.select_related(
            'user', 'parking_lot', 'vehicle', 'vehicle__category'
        )
        if self.request.user.is_staff:
            return queryset
        return queryset.filter(user=self.request.user)

    def get_permissions(self):
        if self.action == 'create':
            return [IsAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):
        """Admin manual booking for a walk-in customer

        Body: {
            "parking_lot": 1, "category": 1, "customer": 7,
            "company_name": "Honda", "registration_number": "DL01AB1234",
            "in_time": "2025-10-27T10:00:00Z"
        }
        """
        serializer = AdminBookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking, vehicle = BookingService.create_booking(
            lot_id=data['parking_lot'],
            category_id=data['category'],
            user=data['customer'],
            vehicle_details=serializer.vehicle_details(),
            payment_id=data.get('payment_id') or settings.MANUAL_PAYMENT_MARKER,
        )
        logger.info(f"Manual booking {booking.id} entered by admin {request.user.username}")
        return Response({
            'message': 'Booking successful',
            'booking': BookingSerializer(booking).data,
        }, status=status.HTTP_201_CREATED)


class VehicleViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Attendant views over the vehicle lifecycle, plus settlement"""

    serializer_class = VehicleSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = VehicleFilter

    def get_queryset(self):
        return Vehicle.objects.select_related('booking__user', 'booking__parking_lot', 'category')

    def _list(self, queryset):
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=False, methods=['get'])
    def upcoming(self, request):
        """Future reservations (IN, in_time ahead)"""
        return self._list(lifecycle.upcoming_vehicles())

    @action(detail=False, methods=['get'])
    def due(self, request):
        """IN vehicles whose in_time has passed and are waiting for the sweep"""
        return self._list(lifecycle.due_vehicles())

    @action(detail=False, methods=['get'])
    def out(self, request):
        """Vehicles awaiting settlement. Runs the due sweep first."""
        lifecycle.sweep_due_vehicles()
        return self._list(lifecycle.awaiting_settlement())

    @action(detail=False, methods=['get'])
    def history(self, request):
        """Settled vehicles"""
        return self._list(lifecycle.settled_vehicles())

    @action(detail=False, methods=['post'])
    def sweep(self, request):
        """Run the IN -> OUT sweep now"""
        moved = lifecycle.sweep_due_vehicles()
        return Response({'moved': moved})

    @action(detail=True, methods=['post'])
    def settle(self, request, pk=None):
        """Settle an OUT vehicle and free its slot

        Body: { "remark": "Paid in full, left at 18:40" }
        """
        serializer = SettleVehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vehicle = BookingService.settle_vehicle(pk, serializer.validated_data['remark'])
        vehicle = self.get_queryset().get(pk=vehicle.pk)
        logger.info(f"Vehicle {vehicle.pk} settled by {request.user.username}")
        return Response({
            'message': 'Vehicle settled successfully',
            'vehicle': VehicleSerializer(vehicle).data,
        })
