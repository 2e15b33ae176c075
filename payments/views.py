# ==================== PAYMENTS/VIEWS.PY ====================
import logging

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response

from bookings.serializers import BookingSerializer
from .serializers import PaymentInitiateSerializer, PaymentConfirmSerializer, PaymentStatusSerializer
from .services import PaymentService

logger = logging.getLogger(__name__)


class PaymentViewSet(viewsets.ViewSet):
    """Checkout, confirmation and status of paid bookings"""
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        # The gateway hash and the signed token authenticate a confirmation.
        if self.action == 'confirm_payment':
            return [permissions.AllowAny()]
        return super().get_permissions()

    @action(detail=False, methods=['post'])
    def initiate_payment(self, request):
        """Start checkout for a booking

        Body: {
            "parking_lot": 1,
            "category": 2,
            "company_name": "Honda",
            "registration_number": "DL01AB1234",
            "in_time": "2025-10-27T10:00:00Z"
        }
        """
        serializer = PaymentInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        checkout = PaymentService.issue_payment_intent(
            request.user,
            serializer.validated_data['parking_lot'],
            serializer.validated_data['category'],
            serializer.vehicle_details(),
        )
        return Response(checkout, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'])
    def confirm_payment(self, request):
        """Create the booking for a verified payment (idempotent)

        Body: {
            "token": "<payment intent token>",
            "callback": {"status": "success", "txnid": "...", "amount": "...", "hash": "...", ...}
        }
        """
        serializer = PaymentConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking, created = PaymentService.confirm_payment(
            serializer.validated_data['callback'],
            serializer.validated_data['token'],
        )
        return Response({
            'message': 'Booking successful' if created else 'Booking already confirmed',
            'status': 'success',
            'booking': BookingSerializer(booking).data,
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    @action(detail=False, methods=['post'])
    def payment_status(self, request):
        """Has the booking behind a payment token been created?

        Body: { "token": "<payment intent token>" }
        """
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PaymentService.payment_status(serializer.validated_data['token'], request.user)
        booking = result['booking']
        return Response({
            'status': result['status'],
            'txnid': result['txnid'],
            'message': 'Booking successful' if booking else 'Booking not created yet',
            'booking': BookingSerializer(booking).data if booking else None,
        }, status=status.HTTP_200_OK)
