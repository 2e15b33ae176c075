# ==================== PAYMENTS/SERVICES.PY ====================
import logging

from django.conf import settings
from django.utils import timezone

from bookings.services import BookingService, VehicleDetails
from parking.models import ParkingLot, Category
from users.models import CustomUser
from utils.exceptions import (
    AlreadyBooked, BookingFailedSlotTaken, CategoryNotFound, LotNotFound,
    NoAvailableSlots, PaymentVerificationFailed,
)
from . import tokens
from .gateways import get_gateway

logger = logging.getLogger(__name__)


class PaymentService:
    """Checkout and confirmation around the booking engine.

    No slot is held while the payer is at the gateway; the booking is created
    only once both the intent token and the gateway hash check out.
    """

    @staticmethod
    def issue_payment_intent(user, lot_id, category_id, vehicle_details, gateway=None):
        """Sign the booking intent and build the gateway checkout payload"""
        try:
            lot = ParkingLot.objects.get(pk=lot_id)
        except (ParkingLot.DoesNotExist, ValueError, TypeError):
            raise LotNotFound()
        if not Category.objects.filter(pk=category_id).exists():
            raise CategoryNotFound()

        # Fail before charging when we already know the booking can not be made.
        if lot.available_slots <= 0:
            raise NoAvailableSlots()
        existing = BookingService.find_existing(vehicle_details.registration_number, vehicle_details.in_time)
        if existing is not None:
            raise AlreadyBooked(booking=existing)

        gateway = gateway or get_gateway()
        intent = tokens.PaymentIntent(
            user_id=user.pk,
            parking_lot_id=lot.pk,
            category_id=int(category_id),
            registration_number=vehicle_details.registration_number,
            company_name=vehicle_details.company_name,
            in_time=vehicle_details.in_time,
        )
        intent = gateway.prepare(intent, lot)
        token = tokens.issue(intent)

        logger.info(f"Payment intent {intent.transaction_id} issued to {user.username} for lot {lot.pk}")
        return {
            'token': token,
            'txnid': intent.transaction_id,
            'gateway': gateway.name,
            'expires_at': timezone.now() + settings.PAYMENT_INTENT_TTL,
            'payment': gateway.checkout(intent, user, lot, token),
        }

    @staticmethod
    def confirm_payment(callback_fields, token, gateway=None):
        """Verify token and gateway hash, then create the booking exactly once.

        Returns (booking, created). A retried callback for the same intent
        returns the existing booking with created=False.
        """
        intent = tokens.verify(token)
        gateway = gateway or get_gateway()
        payment_id = gateway.verify_callback(callback_fields, intent)

        try:
            user = CustomUser.objects.get(pk=intent.user_id)
        except CustomUser.DoesNotExist:
            logger.error(f"Payment {payment_id} confirmed for unknown user {intent.user_id}")
            raise PaymentVerificationFailed("Payer account not found.")

        details = VehicleDetails(
            company_name=intent.company_name,
            registration_number=intent.registration_number,
            in_time=intent.in_time,
        )
        try:
            booking, _vehicle = BookingService.create_booking(
                lot_id=intent.parking_lot_id,
                category_id=intent.category_id,
                user=user,
                vehicle_details=details,
                payment_id=payment_id,
            )
        except AlreadyBooked as exc:
            existing = exc.booking
            if existing is None or existing.user_id != intent.user_id or existing.parking_lot_id != intent.parking_lot_id:
                raise
            if existing.payment_id != payment_id:
                logger.warning(
                    f"Booking {existing.id} already paid with {existing.payment_id}; "
                    f"payment {payment_id} needs a refund"
                )
            logger.info(f"Duplicate confirmation for txn {intent.transaction_id}; returning booking {existing.id}")
            return existing, False
        except NoAvailableSlots:
            logger.error(
                f"Payment {payment_id} (txn {intent.transaction_id}) succeeded but lot "
                f"{intent.parking_lot_id} is full; refund required"
            )
            raise BookingFailedSlotTaken(payment_id=payment_id)

        logger.info(f"Payment {payment_id} confirmed; booking {booking.id} created")
        return booking, True

    @staticmethod
    def payment_status(token, user=None):
        """Whether the booking described by a payment token exists yet"""
        intent = tokens.verify(token)
        if user is not None and not user.is_staff and user.pk != intent.user_id:
            raise PaymentVerificationFailed("User or parking lot mismatch.")

        booking = BookingService.find_existing(intent.registration_number, intent.in_time)
        if booking is None:
            return {'status': 'pending', 'txnid': intent.transaction_id, 'booking': None}
        if booking.user_id != intent.user_id or booking.parking_lot_id != intent.parking_lot_id:
            raise PaymentVerificationFailed("User or parking lot mismatch.")
        return {'status': 'success', 'txnid': intent.transaction_id, 'booking': booking}
