from django.db import models
from users.models import CustomUser
from parking.models import ParkingLot, Category


class VehicleStatus(models.TextChoices):
    IN = 'IN', 'In (reserved or parked)'
    OUT = 'OUT', 'Out (awaiting settlement)'
    DONE = 'DONE', 'Done (settled)'


class Booking(models.Model):
    """Commercial record linking a user to a lot for one vehicle.

    Created only by ``bookings.services.BookingService.create_booking``.
    """
    user = models.ForeignKey(CustomUser, on_delete=models.PROTECT, related_name='bookings')
    parking_lot = models.ForeignKey(ParkingLot, on_delete=models.PROTECT, related_name='bookings')

    # Gateway payment id, our transaction id, or the manual-booking marker
    payment_id = models.CharField(max_length=100, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='booking_user_created_idx'),
            models.Index(fields=['parking_lot', 'created_at'], name='booking_lot_created_idx'),
        ]

    def __str__(self):
        return f"Booking {self.id} - {self.user.username} at {self.parking_lot.location}"


class Vehicle(models.Model):
    """Occupancy record of a booking; status is driven by bookings.lifecycle"""
    booking = models.OneToOneField(Booking, on_delete=models.PROTECT, related_name='vehicle')
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='vehicles')

    company_name = models.CharField(max_length=100)
    registration_number = models.CharField(max_length=50, db_index=True)

    in_time = models.DateTimeField(db_index=True)
    out_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=4, choices=VehicleStatus.choices, default=VehicleStatus.IN, db_index=True)
    remark = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['in_time']
        indexes = [
            models.Index(fields=['status', 'in_time'], name='vehicle_status_in_time_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['registration_number', 'in_time'],
                name='vehicle_unique_registration_in_time',
            ),
        ]

    def __str__(self):
        return f"{self.registration_number} ({self.status})"
