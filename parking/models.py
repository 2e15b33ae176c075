# parking/models.py

from django.db import models
from django.db.models import F, Q
from django.core.validators import MinValueValidator
from users.models import CustomUser


class ParkingLot(models.Model):
    """A physical parking location with a fixed number of slots.

    ``booked_slot`` is owned by ``parking.ledger.SlotLedger``; nothing else writes it.
    """
    admin = models.ForeignKey(CustomUser, on_delete=models.PROTECT, related_name='parking_lots')

    location = models.CharField(max_length=255)
    img_url = models.URLField(max_length=500, blank=True)

    total_slot = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    booked_slot = models.PositiveIntegerField(default=0, editable=False)

    # Hourly price
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['location'], name='parking_lot_location_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(booked_slot__gte=0),
                name='parking_lot_booked_slot_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(booked_slot__lte=F('total_slot')),
                name='parking_lot_booked_slot_within_capacity',
            ),
        ]

    def __str__(self):
        return f"{self.location} ({self.booked_slot}/{self.total_slot})"

    @property
    def available_slots(self):
        return self.total_slot - self.booked_slot


class Category(models.Model):
    """Vehicle category label, e.g. Car or Bike"""
    vehicle_cat = models.CharField(max_length=100)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['vehicle_cat']
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.vehicle_cat
