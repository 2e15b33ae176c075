# ============================= BOOKINGS/FILTERS.PY =============================
import django_filters
from .models import Vehicle


class VehicleFilter(django_filters.FilterSet):
    """Filters shared by the vehicle occupancy views"""

    parking_lot = django_filters.NumberFilter(
        field_name='booking__parking_lot',
        label='Parking Lot'
    )
    registration_number = django_filters.CharFilter(
        field_name='registration_number',
        lookup_expr='icontains',
        label='Registration Number'
    )
    in_time_after = django_filters.IsoDateTimeFilter(
        field_name='in_time',
        lookup_expr='gte',
        label='In Time From'
    )
    in_time_before = django_filters.IsoDateTimeFilter(
        field_name='in_time',
        lookup_expr='lte',
        label='In Time Until'
    )

    class Meta:
        model = Vehicle
        fields = ['category']
