# ==================== BOOKINGS/TASKS.PY (CELERY TASKS) ====================
from celery import shared_task
import logging

from . import lifecycle

logger = logging.getLogger(__name__)


@shared_task
def sweep_due_vehicles():
    """Scheduled IN -> OUT sweep for vehicles whose in_time has passed"""
    moved = lifecycle.sweep_due_vehicles()
    logger.info(f"Scheduled sweep moved {moved} vehicle(s) to OUT")
    return moved
