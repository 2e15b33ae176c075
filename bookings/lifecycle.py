# ==================== BOOKINGS/LIFECYCLE.PY ====================
"""Vehicle occupancy state machine.

    IN  -- sweep (in_time passed) -->  OUT  -- settlement -->  DONE

Transitions only move forward and never skip a state. The IN -> OUT sweep
does not touch the slot counter; only settlement releases the slot.
"""
import logging

from django.db import transaction
from django.utils import timezone

from utils.exceptions import InvalidStateTransition
from .models import Vehicle, VehicleStatus

logger = logging.getLogger(__name__)

TRANSITIONS = {
    VehicleStatus.IN: {VehicleStatus.OUT},
    VehicleStatus.OUT: {VehicleStatus.DONE},
    VehicleStatus.DONE: set(),
}


def can_transition(current, target):
    return target in TRANSITIONS.get(current, set())


def ensure_transition(current, target):
    if not can_transition(current, target):
        raise InvalidStateTransition(f"Cannot move vehicle from {current} to {target}")


def _for_lot(queryset, lot):
    if lot is not None:
        queryset = queryset.filter(booking__parking_lot=lot)
    return queryset.select_related('booking__user', 'booking__parking_lot', 'category')


def sweep_due_vehicles(now=None):
    """Move every IN vehicle whose in_time has passed to OUT. Returns the number moved."""
    now = now or timezone.now()
    with transaction.atomic():
        moved = Vehicle.objects.filter(
            status=VehicleStatus.IN,
            in_time__lte=now,
        ).update(status=VehicleStatus.OUT, updated_at=now)
    if moved:
        logger.info(f"Swept {moved} due vehicle(s) from IN to OUT")
    return moved


def upcoming_vehicles(lot=None, now=None):
    """Future reservations: IN with in_time still ahead"""
    now = now or timezone.now()
    return _for_lot(Vehicle.objects.filter(status=VehicleStatus.IN, in_time__gt=now), lot)


def due_vehicles(lot=None, now=None):
    """IN vehicles whose in_time has passed but have not been swept yet"""
    now = now or timezone.now()
    return _for_lot(Vehicle.objects.filter(status=VehicleStatus.IN, in_time__lte=now), lot)


def awaiting_settlement(lot=None):
    return _for_lot(Vehicle.objects.filter(status=VehicleStatus.OUT), lot)


def settled_vehicles(lot=None):
    return _for_lot(Vehicle.objects.filter(status=VehicleStatus.DONE), lot).order_by('-out_time')
