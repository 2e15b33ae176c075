# ==================== BOOKINGS/SERVICES.PY ====================
import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from parking.ledger import SlotLedger
from parking.models import Category
from utils.exceptions import (
    AlreadyBooked, BookingNotFound, CategoryNotFound, InvalidStateTransition, VehicleNotFound,
)
from .lifecycle import ensure_transition
from .models import Booking, Vehicle, VehicleStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VehicleDetails:
    company_name: str
    registration_number: str
    in_time: datetime


class BookingService:
    """The only code path that creates bookings or settles vehicles"""

    @staticmethod
    def find_existing(registration_number, in_time):
        """Booking already created for this vehicle and in-time, if any"""
        vehicle = (
            Vehicle.objects.select_related('booking')
            .filter(registration_number=registration_number, in_time=in_time)
            .first()
        )
        return vehicle.booking if vehicle else None

    @staticmethod
    def create_booking(lot_id, category_id, user, vehicle_details, payment_id):
        """Reserve a slot and create the Booking + Vehicle pair in one transaction.

        Raises LotNotFound, CategoryNotFound, NoAvailableSlots or AlreadyBooked;
        on any error nothing is written and the slot counter is unchanged.
        """
        try:
            with transaction.atomic():
                try:
                    category = Category.objects.get(pk=category_id)
                except (Category.DoesNotExist, ValueError, TypeError):
                    raise CategoryNotFound()

                # Locks the lot row; concurrent bookings on this lot queue up here.
                SlotLedger.lock(lot_id)

                existing = BookingService.find_existing(
                    vehicle_details.registration_number, vehicle_details.in_time
                )
                if existing is not None:
                    raise AlreadyBooked(booking=existing)

                lot = SlotLedger.reserve(lot_id)

                booking = Booking.objects.create(
                    user=user,
                    parking_lot=lot,
                    payment_id=str(payment_id),
                )
                vehicle = Vehicle.objects.create(
                    booking=booking,
                    category=category,
                    company_name=vehicle_details.company_name,
                    registration_number=vehicle_details.registration_number,
                    in_time=vehicle_details.in_time,
                    status=VehicleStatus.IN,
                )
        except IntegrityError:
            # Lost a race on the (registration_number, in_time) unique constraint.
            existing = BookingService.find_existing(
                vehicle_details.registration_number, vehicle_details.in_time
            )
            if existing is None:
                raise
            raise AlreadyBooked(booking=existing)

        logger.info(
            f"Booking {booking.id} created for {vehicle_details.registration_number} "
            f"at lot {lot.id} (payment {booking.payment_id})"
        )
        return booking, vehicle

    @staticmethod
    def settle_vehicle(vehicle_id, remark):
        """OUT -> DONE, stamp out_time and remark, release the slot. All or nothing."""
        remark = (remark or '').strip()
        if not remark:
            raise ValidationError({'remark': "A remark is required to settle a vehicle"})

        with transaction.atomic():
            try:
                vehicle = Vehicle.objects.select_for_update().get(pk=vehicle_id)
            except (Vehicle.DoesNotExist, ValueError, TypeError):
                raise VehicleNotFound()

            if vehicle.status != VehicleStatus.OUT:
                raise InvalidStateTransition(
                    f"Only OUT vehicles can be settled (vehicle {vehicle.pk} is {vehicle.status})"
                )
            ensure_transition(vehicle.status, VehicleStatus.DONE)

            vehicle.status = VehicleStatus.DONE
            vehicle.out_time = timezone.now()
            vehicle.remark = remark
            vehicle.save(update_fields=['status', 'out_time', 'remark', 'updated_at'])

            try:
                booking = Booking.objects.get(pk=vehicle.booking_id)
            except Booking.DoesNotExist:
                raise BookingNotFound()

            SlotLedger.release(booking.parking_lot_id)

        logger.info(f"Vehicle {vehicle.pk} settled; slot released at lot {booking.parking_lot_id}")
        return vehicle
