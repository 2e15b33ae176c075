# ==================== PARKING/LEDGER.PY ====================
import logging

from django.db import transaction
from django.db.models import F

from utils.exceptions import LotNotFound, NoAvailableSlots, SlotLedgerInvariantError
from .models import ParkingLot

logger = logging.getLogger(__name__)


class SlotLedger:
    """Single writer of ParkingLot.booked_slot.

    Both operations must run inside the caller's ``transaction.atomic()`` block:
    the lot row stays locked until that transaction commits or rolls back, so a
    failed booking or settlement never leaves the counter changed.
    """

    @staticmethod
    def lock(lot_id):
        """Lock and return the lot row"""
        try:
            return ParkingLot.objects.select_for_update().get(pk=lot_id)
        except (ParkingLot.DoesNotExist, ValueError, TypeError):
            raise LotNotFound()

    @staticmethod
    def reserve(lot_id):
        """Take one slot. Raises NoAvailableSlots without writing when the lot is full."""
        if not transaction.get_connection().in_atomic_block:
            raise RuntimeError("SlotLedger.reserve() must run inside transaction.atomic()")

        lot = SlotLedger.lock(lot_id)
        updated = ParkingLot.objects.filter(
            pk=lot.pk,
            booked_slot__lt=F('total_slot'),
        ).update(booked_slot=F('booked_slot') + 1)

        if not updated:
            logger.warning(f"Lot {lot.pk} fully booked ({lot.booked_slot}/{lot.total_slot})")
            raise NoAvailableSlots()

        lot.refresh_from_db(fields=['booked_slot', 'total_slot'])
        logger.info(f"Slot reserved at lot {lot.pk}: {lot.booked_slot}/{lot.total_slot}")
        return lot

    @staticmethod
    def release(lot_id):
        """Give one slot back"""
        if not transaction.get_connection().in_atomic_block:
            raise RuntimeError("SlotLedger.release() must run inside transaction.atomic()")

        lot = SlotLedger.lock(lot_id)
        updated = ParkingLot.objects.filter(
            pk=lot.pk,
            booked_slot__gt=0,
        ).update(booked_slot=F('booked_slot') - 1)

        if not updated:
            logger.critical(f"Slot ledger invariant violated: release on lot {lot.pk} with booked_slot=0")
            raise SlotLedgerInvariantError(f"release() would drive booked_slot below 0 for lot {lot.pk}")

        lot.refresh_from_db(fields=['booked_slot', 'total_slot'])
        logger.info(f"Slot released at lot {lot.pk}: {lot.booked_slot}/{lot.total_slot}")
        return lot
