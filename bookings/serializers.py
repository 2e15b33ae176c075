# ==================== BOOKINGS/SERIALIZERS.PY ====================
from rest_framework import serializers
from users.models import CustomUser
from .models import Booking, Vehicle
from .services import VehicleDetails


class VehicleDetailsSerializer(serializers.Serializer):
    """Vehicle fields supplied by a client when booking"""
    company_name = serializers.CharField(max_length=100)
    registration_number = serializers.CharField(max_length=50)
    in_time = serializers.DateTimeField()

    def validate_registration_number(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Registration number is required")
        return value

    def vehicle_details(self):
        data = self.validated_data
        return VehicleDetails(
            company_name=data['company_name'],
            registration_number=data['registration_number'],
            in_time=data['in_time'],
        )


class AdminBookingCreateSerializer(VehicleDetailsSerializer):
    """Walk-in booking entered by an admin on behalf of a registered customer"""
    parking_lot = serializers.IntegerField()
    category = serializers.IntegerField()
    customer = serializers.PrimaryKeyRelatedField(
        queryset=CustomUser.objects.all(),
        error_messages={'does_not_exist': 'User not found. Please ensure the user is registered.'},
    )
    payment_id = serializers.CharField(max_length=100, required=False)


class SettleVehicleSerializer(serializers.Serializer):
    remark = serializers.CharField()


class VehicleSerializer(serializers.ModelSerializer):
    booking_id = serializers.IntegerField(source='booking.id', read_only=True)
    parking_lot = serializers.IntegerField(source='booking.parking_lot_id', read_only=True)
    parking_lot_location = serializers.CharField(source='booking.parking_lot.location', read_only=True)
    category_name = serializers.CharField(source='category.vehicle_cat', read_only=True)
    owner_name = serializers.SerializerMethodField()

    class Meta:
        model = Vehicle
        fields = ['id', 'booking_id', 'parking_lot', 'parking_lot_location', 'category', 'category_name',
                  'company_name', 'registration_number', 'in_time', 'out_time', 'status', 'remark',
                  'owner_name']
        read_only_fields = fields

    def get_owner_name(self, obj):
        user = obj.booking.user
        return user.get_full_name() or user.username


class BookingSerializer(serializers.ModelSerializer):
    parking_lot_location = serializers.CharField(source='parking_lot.location', read_only=True)
    vehicle = VehicleSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = ['id', 'user', 'parking_lot', 'parking_lot_location', 'payment_id', 'created_at', 'vehicle']
        read_only_fields = fields
