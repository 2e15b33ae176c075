# ============================= PARKING/FILTERS.PY =============================
import django_filters
from django.db.models import F
from .models import ParkingLot


class ParkingLotFilter(django_filters.FilterSet):
    """Filtering for parking lots"""

    price_min = django_filters.NumberFilter(
        field_name='price',
        lookup_expr='gte',
        label='Minimum Hourly Price'
    )
    price_max = django_filters.NumberFilter(
        field_name='price',
        lookup_expr='lte',
        label='Maximum Hourly Price'
    )
    has_available = django_filters.BooleanFilter(
        method='filter_has_available',
        label='Has Free Slots'
    )

    class Meta:
        model = ParkingLot
        fields = {
            'location': ['exact', 'icontains'],
            'admin': ['exact'],
        }

    def filter_has_available(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(booked_slot__lt=F('total_slot'))
        return queryset.filter(booked_slot__gte=F('total_slot'))
