# ==================== USERS/ADMIN.PY ====================
from django.contrib import admin
from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ['username', 'email', 'phone_number', 'is_staff', 'created_at']
    list_filter = ['is_staff', 'created_at']
    search_fields = ['username', 'email', 'phone_number']
    readonly_fields = ['created_at', 'updated_at']
