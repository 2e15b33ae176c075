from django.db import models
from django.contrib.auth.models import AbstractUser
from phonenumber_field.modelfields import PhoneNumberField


class CustomUser(AbstractUser):
    """Customer or admin account. Admins (is_staff) own parking lots and settle vehicles."""
    phone_number = PhoneNumberField(unique=True, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        role = 'admin' if self.is_staff else 'user'
        return f"{self.username} ({role})"
