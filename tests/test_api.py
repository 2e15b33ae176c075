from datetime import timedelta

from django.conf import settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from bookings import lifecycle
from bookings.models import Booking, Vehicle, VehicleStatus
from bookings.services import BookingService
from parking.models import ParkingLot
from tests.utils import make_user, make_lot, make_category, vehicle_details


class AuthAPITests(APITestCase):
    def test_register_returns_tokens(self):
        response = self.client.post(reverse('register'), {
            'username': 'meera',
            'email': 'meera@example.com',
            'password': 'long-enough-pass',
            'password_confirm': 'long-enough-pass',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertFalse(response.data['user']['is_admin'])

    def test_register_password_mismatch(self):
        response = self.client.post(reverse('register'), {
            'username': 'meera',
            'password': 'long-enough-pass',
            'password_confirm': 'different-pass',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_and_profile(self):
        make_user('admin', staff=True)
        response = self.client.post(reverse('login'), {
            'username': 'admin', 'password': 'secret-pass-123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['user']['is_admin'])

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        profile = self.client.get(reverse('profile'))
        self.assertEqual(profile.status_code, status.HTTP_200_OK)
        self.assertEqual(profile.data['username'], 'admin')

    def test_profile_requires_login(self):
        self.assertEqual(self.client.get(reverse('profile')).status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bad_credentials(self):
        make_user('driver')
        response = self.client.post(reverse('login'), {'username': 'driver', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_password(self):
        user = make_user('driver')
        self.client.force_authenticate(user)
        url = reverse('change_password')

        response = self.client.post(url, {'current_password': 'wrong-pass', 'new_password': 'brand-new-pass'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data)

        response = self.client.post(url, {'current_password': 'secret-pass-123', 'new_password': 'secret-pass-123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('new_password', response.data)

        response = self.client.post(url, {'current_password': 'secret-pass-123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'current_password': 'secret-pass-123', 'new_password': 'brand-new-pass'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertTrue(user.check_password('brand-new-pass'))

    def test_change_password_requires_login(self):
        response = self.client.post(reverse('change_password'), {
            'current_password': 'secret-pass-123', 'new_password': 'brand-new-pass',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class RegisteredUserAPITests(APITestCase):
    def setUp(self):
        self.admin = make_user('admin', staff=True)
        self.customer = make_user('customer', first_name='Kavya')
        make_user('idle')
        lot = make_lot(self.admin)
        BookingService.create_booking(lot.pk, make_category().pk, self.customer, vehicle_details('TS08EF4321'), 'p1')

    def test_admin_lists_customers_with_bookings(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse('registered-user-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        users = {user['username']: user for user in response.data['results']}
        self.assertEqual(set(users), {'customer', 'idle'})
        self.assertEqual(users['customer']['total_bookings'], 1)
        self.assertEqual(users['customer']['bookings'][0]['vehicle']['registration_number'], 'TS08EF4321')
        self.assertEqual(users['idle']['bookings'], [])

    def test_search_finds_customer_id_for_manual_booking(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse('registered-user-list'), {'search': 'kavya'})
        self.assertEqual([user['id'] for user in response.data['results']], [self.customer.pk])

    def test_customers_can_not_list_users(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get(reverse('registered-user-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ParkingLotAPITests(APITestCase):
    def setUp(self):
        self.admin = make_user('admin', staff=True)
        self.other_admin = make_user('admin2', staff=True)
        self.user = make_user('driver')

    def test_admin_creates_lot_with_empty_counter(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('parking-lot-list'), {
            'location': 'Koramangala',
            'total_slot': 20,
            'booked_slot': 15,
            'price': '40.00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        lot = ParkingLot.objects.get(pk=response.data['id'])
        self.assertEqual(lot.admin, self.admin)
        self.assertEqual(lot.booked_slot, 0)
        self.assertEqual(response.data['available_slots'], 20)

    def test_users_can_list_but_not_create(self):
        make_lot(self.admin)
        self.client.force_authenticate(self.user)

        self.assertEqual(self.client.get(reverse('parking-lot-list')).data['count'], 1)
        response = self.client.post(reverse('parking-lot-list'), {
            'location': 'Indiranagar', 'total_slot': 5, 'price': '10.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_capacity_can_not_drop_below_booked(self):
        lot = make_lot(self.admin, total_slot=5, booked_slot=4)
        self.client.force_authenticate(self.admin)

        url = reverse('parking-lot-detail', args=[lot.pk])
        response = self.client.patch(url, {'total_slot': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {'total_slot': 8, 'booked_slot': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lot.refresh_from_db()
        self.assertEqual((lot.total_slot, lot.booked_slot), (8, 4))

    def test_only_owning_admin_edits(self):
        lot = make_lot(self.admin)
        self.client.force_authenticate(self.other_admin)
        response = self.client.patch(reverse('parking-lot-detail', args=[lot.pk]), {'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_available_filter(self):
        make_lot(self.admin, total_slot=2, booked_slot=2, location='Full')
        make_lot(self.admin, total_slot=2, booked_slot=1, location='Open')
        self.client.force_authenticate(self.user)

        response = self.client.get(reverse('parking-lot-list'), {'has_available': 'true'})
        self.assertEqual([lot['location'] for lot in response.data['results']], ['Open'])

    def test_lot_with_bookings_can_not_be_deleted(self):
        lot = make_lot(self.admin)
        BookingService.create_booking(lot.pk, make_category().pk, self.user, vehicle_details(), 'pay')
        self.client.force_authenticate(self.admin)

        response = self.client.delete(reverse('parking-lot-detail', args=[lot.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(ParkingLot.objects.filter(pk=lot.pk).exists())


class CategoryAPITests(APITestCase):
    def test_admin_manages_categories(self):
        self.client.force_authenticate(make_user('admin', staff=True))
        response = self.client.post(reverse('category-list'), {'vehicle_cat': ' Bike '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['vehicle_cat'], 'Bike')

        response = self.client.delete(reverse('category-detail', args=[response.data['id']]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_category_in_use_is_kept(self):
        admin = make_user('admin', staff=True)
        category = make_category('Truck')
        BookingService.create_booking(make_lot(admin).pk, category.pk, make_user('driver'), vehicle_details(), 'pay')
        self.client.force_authenticate(admin)

        response = self.client.delete(reverse('category-detail', args=[category.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_users_read_only(self):
        make_category('Car')
        self.client.force_authenticate(make_user('driver'))
        self.assertEqual(len(self.client.get(reverse('category-list')).data), 1)
        response = self.client.post(reverse('category-list'), {'vehicle_cat': 'Bus'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AdminBookingAPITests(APITestCase):
    def setUp(self):
        self.admin = make_user('admin', staff=True)
        self.customer = make_user('customer')
        self.category = make_category()
        self.lot = make_lot(self.admin, total_slot=1)
        self.payload = {
            'parking_lot': self.lot.pk,
            'category': self.category.pk,
            'customer': self.customer.pk,
            'company_name': 'Tata',
            'registration_number': ' mh12ab9999 ',
            'in_time': (timezone.now() + timedelta(hours=1)).isoformat(),
        }

    def test_manual_booking(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('booking-list'), self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Booking successful')
        booking = Booking.objects.get()
        self.assertEqual(booking.user, self.customer)
        self.assertEqual(booking.payment_id, settings.MANUAL_PAYMENT_MARKER)
        self.assertEqual(booking.vehicle.registration_number, 'MH12AB9999')
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.booked_slot, 1)

    def test_full_lot_and_duplicate(self):
        self.client.force_authenticate(self.admin)
        self.client.post(reverse('booking-list'), self.payload, format='json')

        response = self.client.post(reverse('booking-list'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        self.payload['registration_number'] = 'MH12AB0000'
        response = self.client.post(reverse('booking-list'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['detail'].code, 'no_available_slots')

    def test_unregistered_customer(self):
        self.client.force_authenticate(self.admin)
        self.payload['customer'] = 999999
        response = self.client.post(reverse('booking-list'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer', response.data)

    def test_unknown_lot(self):
        self.client.force_authenticate(self.admin)
        self.payload['parking_lot'] = 999999
        response = self.client.post(reverse('booking-list'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_users_can_not_enter_bookings(self):
        self.client.force_authenticate(self.customer)
        response = self.client.post(reverse('booking-list'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_users_see_only_their_bookings(self):
        big_lot = make_lot(self.admin, total_slot=5, location='Big')
        BookingService.create_booking(big_lot.pk, self.category.pk, self.customer, vehicle_details('A1'), 'p1')
        BookingService.create_booking(big_lot.pk, self.category.pk, make_user('other'), vehicle_details('B2'), 'p2')

        self.client.force_authenticate(self.customer)
        response = self.client.get(reverse('booking-list'))
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['vehicle']['registration_number'], 'A1')

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(reverse('booking-list')).data['count'], 2)


class VehicleAPITests(APITestCase):
    def setUp(self):
        self.admin = make_user('admin', staff=True)
        self.user = make_user('driver')
        self.category = make_category()
        self.lot = make_lot(self.admin, total_slot=5)
        now = timezone.now()
        _, self.due = BookingService.create_booking(
            self.lot.pk, self.category.pk, self.user, vehicle_details('DUE1', now - timedelta(minutes=30)), 'p1'
        )
        _, self.upcoming = BookingService.create_booking(
            self.lot.pk, self.category.pk, self.user, vehicle_details('SOON1', now + timedelta(hours=2)), 'p2'
        )
        self.client.force_authenticate(self.admin)

    def registrations(self, response):
        return [vehicle['registration_number'] for vehicle in response.data['results']]

    def test_views_by_state(self):
        self.assertEqual(self.registrations(self.client.get(reverse('vehicle-upcoming'))), ['SOON1'])
        self.assertEqual(self.registrations(self.client.get(reverse('vehicle-due'))), ['DUE1'])

        out = self.client.get(reverse('vehicle-out'))
        self.assertEqual(self.registrations(out), ['DUE1'])
        self.assertEqual(out.data['results'][0]['status'], VehicleStatus.OUT)
        self.assertEqual(self.registrations(self.client.get(reverse('vehicle-due'))), [])

    def test_filter_by_lot(self):
        other = make_lot(self.admin, location='Elsewhere')
        response = self.client.get(reverse('vehicle-upcoming'), {'parking_lot': other.pk})
        self.assertEqual(self.registrations(response), [])

    def test_sweep_endpoint(self):
        response = self.client.post(reverse('vehicle-sweep'))
        self.assertEqual(response.data, {'moved': 1})

    def test_settle(self):
        lifecycle.sweep_due_vehicles()
        response = self.client.post(reverse('vehicle-settle', args=[self.due.pk]), {'remark': 'Cash'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['vehicle']['status'], VehicleStatus.DONE)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.booked_slot, 1)
        self.assertEqual(self.registrations(self.client.get(reverse('vehicle-history'))), ['DUE1'])

    def test_settle_errors(self):
        url = reverse('vehicle-settle', args=[self.upcoming.pk])
        self.assertEqual(self.client.post(url, {'remark': 'Cash'}, format='json').status_code,
                         status.HTTP_409_CONFLICT)
        self.assertEqual(self.client.post(url, {'remark': ''}, format='json').status_code,
                         status.HTTP_400_BAD_REQUEST)
        missing = reverse('vehicle-settle', args=[999999])
        self.assertEqual(self.client.post(missing, {'remark': 'Cash'}, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)
        self.assertEqual(Vehicle.objects.get(pk=self.upcoming.pk).status, VehicleStatus.IN)

    def test_admin_only(self):
        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.get(reverse('vehicle-due')).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.post(reverse('vehicle-sweep')).status_code, status.HTTP_403_FORBIDDEN)
