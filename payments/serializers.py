# ==================== PAYMENTS/SERIALIZERS.PY ====================
from rest_framework import serializers
from bookings.serializers import VehicleDetailsSerializer
from .gateways import get_gateway


class PaymentInitiateSerializer(VehicleDetailsSerializer):
    parking_lot = serializers.IntegerField()
    category = serializers.IntegerField()


class PaymentConfirmSerializer(serializers.Serializer):
    """Token from the success URL plus the fields the gateway posted back"""
    token = serializers.CharField()
    callback = serializers.DictField(child=serializers.CharField(allow_blank=True))

    def validate_callback(self, value):
        missing = [name for name in get_gateway().required_callback_fields if not value.get(name)]
        if missing:
            raise serializers.ValidationError(f"Missing gateway fields: {', '.join(missing)}")
        return value


class PaymentStatusSerializer(serializers.Serializer):
    token = serializers.CharField()
