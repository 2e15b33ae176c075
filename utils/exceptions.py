# ==================== UTILS/EXCEPTIONS.PY ====================
from rest_framework.exceptions import APIException
from rest_framework import status


# --- Not found ---

class LotNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Parking lot not found.'
    default_code = 'lot_not_found'


class CategoryNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Vehicle category not found.'
    default_code = 'category_not_found'


class VehicleNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Vehicle not found.'
    default_code = 'vehicle_not_found'


class BookingNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Booking not found.'
    default_code = 'booking_not_found'


# --- Capacity / conflicts ---

class NoAvailableSlots(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Parking lot is fully booked.'
    default_code = 'no_available_slots'


class BookingFailedSlotTaken(APIException):
    """Payment went through but the last slot was taken before the booking was created."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Payment received but the parking lot filled up before the booking was created.'
    default_code = 'booking_failed_slot_taken'

    def __init__(self, payment_id=None, detail=None, code=None):
        super().__init__(detail, code)
        self.payment_id = payment_id


class AlreadyBooked(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A booking already exists for this vehicle and in-time.'
    default_code = 'already_booked'

    def __init__(self, booking=None, detail=None, code=None):
        super().__init__(detail, code)
        self.booking = booking


class InvalidStateTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Vehicle is not in a state that allows this action.'
    default_code = 'invalid_state_transition'


# --- Integrity violations ---

class PaymentIntentExpired(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Payment session has expired.'
    default_code = 'payment_intent_expired'


class PaymentIntentMalformed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid payment token format.'
    default_code = 'payment_intent_malformed'


class PaymentIntentSignatureMismatch(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Payment token signature is invalid.'
    default_code = 'payment_intent_signature_mismatch'


class PaymentVerificationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Payment verification failed.'
    default_code = 'payment_verification_failed'


class SlotLedgerInvariantError(RuntimeError):
    """booked_slot would leave [0, total_slot]. Always a bug, never a user error."""
