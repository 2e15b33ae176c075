# ==================== PARKING/SERIALIZERS.PY ====================
from django.db import transaction
from rest_framework import serializers
from .models import ParkingLot, Category


class ParkingLotSerializer(serializers.ModelSerializer):
    """Lot with live availability. booked_slot is read-only: only the slot ledger moves it."""
    admin_name = serializers.CharField(source='admin.get_full_name', read_only=True)
    available_slots = serializers.IntegerField(read_only=True)

    class Meta:
        model = ParkingLot
        fields = ['id', 'location', 'img_url', 'total_slot', 'booked_slot', 'available_slots',
                  'price', 'admin', 'admin_name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'booked_slot', 'admin', 'created_at', 'updated_at']

    def validate_total_slot(self, value):
        if self.instance is not None and value < self.instance.booked_slot:
            raise serializers.ValidationError(
                f"Cannot reduce capacity below the {self.instance.booked_slot} slots currently booked"
            )
        return value

    def create(self, validated_data):
        validated_data['admin'] = self.context['request'].user
        return super().create(validated_data)

    def update(self, instance, validated_data):
        # Re-check capacity against the locked row and never write booked_slot back.
        with transaction.atomic():
            lot = ParkingLot.objects.select_for_update().get(pk=instance.pk)
            total_slot = validated_data.get('total_slot')
            if total_slot is not None and total_slot < lot.booked_slot:
                raise serializers.ValidationError({
                    'total_slot': f"Cannot reduce capacity below the {lot.booked_slot} slots currently booked"
                })
            for field, value in validated_data.items():
                setattr(lot, field, value)
            lot.save(update_fields=[*validated_data.keys(), 'updated_at'])
        return lot


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'vehicle_cat', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_vehicle_cat(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Category name is required")
        return value
