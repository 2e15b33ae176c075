# ==================== BOOKINGS/ADMIN.PY ====================
from django.contrib import admin
from .models import Booking, Vehicle


class VehicleInline(admin.StackedInline):
    model = Vehicle
    can_delete = False
    extra = 0
    readonly_fields = ['category', 'company_name', 'registration_number', 'in_time',
                       'out_time', 'status', 'remark', 'created_at', 'updated_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-only: bookings are created by the booking service and settled through the API"""
    list_display = ['id', 'user', 'parking_lot', 'payment_id', 'created_at']
    list_filter = ['created_at']
    search_fields = ['user__username', 'parking_lot__location', 'vehicle__registration_number', 'payment_id']
    readonly_fields = ['user', 'parking_lot', 'payment_id', 'created_at']
    inlines = [VehicleInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ['registration_number', 'booking', 'category', 'status', 'in_time', 'out_time']
    list_filter = ['status', 'category', 'in_time']
    search_fields = ['registration_number', 'company_name', 'booking__user__username']
    readonly_fields = [f.name for f in Vehicle._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
