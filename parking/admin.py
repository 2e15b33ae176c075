# ==================== PARKING/ADMIN.PY ====================
from django.contrib import admin
from .models import ParkingLot, Category


@admin.register(ParkingLot)
class ParkingLotAdmin(admin.ModelAdmin):
    list_display = ['location', 'admin', 'total_slot', 'booked_slot', 'price', 'created_at']
    list_filter = ['created_at']
    search_fields = ['location', 'admin__username']
    # booked_slot is owned by the slot ledger
    readonly_fields = ['booked_slot', 'created_at', 'updated_at']
    fieldsets = (
        ('Basic Info', {'fields': ('admin', 'location', 'img_url')}),
        ('Capacity', {'fields': ('total_slot', 'booked_slot')}),
        ('Pricing', {'fields': ('price',)}),
        ('Timestamps', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    def save_model(self, request, obj, form, change):
        if change:
            # Never write a stale booked_slot back over a concurrent reservation.
            if form.changed_data:
                obj.save(update_fields=[*form.changed_data, 'updated_at'])
            return
        obj.save()


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['vehicle_cat', 'created_at']
    search_fields = ['vehicle_cat']
