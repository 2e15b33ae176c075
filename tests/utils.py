from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from bookings.services import VehicleDetails
from parking.models import ParkingLot, Category
from payments.gateways import PayUGateway
from users.models import CustomUser


def make_user(username='driver', staff=False, **extra):
    return CustomUser.objects.create_user(
        username=username,
        password='secret-pass-123',
        email=extra.pop('email', f'{username}@example.com'),
        is_staff=staff,
        **extra
    )


def make_lot(admin, total_slot=5, booked_slot=0, price='50.00', location='MG Road'):
    return ParkingLot.objects.create(
        admin=admin,
        location=location,
        total_slot=total_slot,
        booked_slot=booked_slot,
        price=Decimal(price),
    )


def make_category(name='Car'):
    return Category.objects.create(vehicle_cat=name)


def vehicle_details(registration_number='DL01AB1234', in_time=None, company_name='Honda'):
    return VehicleDetails(
        company_name=company_name,
        registration_number=registration_number,
        in_time=in_time or timezone.now() + timedelta(hours=2),
    )


def payu_callback(checkout, status='success', mihpayid='403993715521', **overrides):
    """Fields PayU posts to surl for the checkout payload we handed out"""
    gateway = PayUGateway()
    fields = {
        'status': status,
        'txnid': checkout['txnid'],
        'amount': checkout['amount'],
        'productinfo': checkout['productinfo'],
        'firstname': checkout['firstname'],
        'email': checkout['email'],
        'mihpayid': mihpayid,
    }
    fields.update(overrides)
    fields['hash'] = gateway.response_hash(
        fields['status'], fields['txnid'], fields['amount'],
        fields['productinfo'], fields['firstname'], fields['email'],
    )
    return fields
