"""
Comprehensive test suite for bookings module
Tests: Reservations, Appointments, Shop unavailability, Public tracking
"""
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from kasal.core.models import AuditLog, ShopSettings
from kasal.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CUSTOMER_INFO
from kasal.bookings.models import Reservation, Appointment, FulfillmentPreview, Unavailability
from kasal.rentals.models import Rental, PackageFulfillment


def days_from_today(days):
    return timezone.localdate() + timedelta(days=days)


class ReservationCreateTests(TestCase):
    """Test storefront reservation placement"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.variation = TestDataFactory.create_variation(quantity=5, price=Decimal('1500.00'))

    def _payload(self, **overrides):
        data = {
            'customer_info': CUSTOMER_INFO,
            'reserve_date': days_from_today(7).isoformat(),
            'item_reservations': [{'variation_id': self.variation.id, 'quantity': 1}],
            'payment': {'amount': '1000.00', 'method': 'GCash', 'reference_number': 'GC-998877'},
        }
        data.update(overrides)
        return data

    def test_public_create_reservation(self):
        """Anonymous customers can place a reservation with a half payment"""
        response = self.client.post('/api/v1/reservations/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['id'].startswith('RES-'))
        self.assertEqual(response.data['status'], 'Pending')
        self.assertEqual(response.data['required_deposit'], '500.00')
        self.assertEqual(response.data['financials']['grand_total'], Decimal('2000.00'))
        self.assertEqual(response.data['financials']['total_paid'], Decimal('1000.00'))

        audit = AuditLog.objects.get(model_name='Reservation', action='create')
        self.assertIsNone(audit.user)

    def test_reservation_does_not_take_stock(self):
        """Reservations only block dates; shelf stock is untouched"""
        self.client.post('/api/v1/reservations/', self._payload(), format='json')
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 5)

    def test_payment_required(self):
        """A reservation with a balance must carry a payment"""
        response = self.client.post('/api/v1/reservations/', self._payload(payment=None), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Payment details are required for this reservation.')

    def test_payment_insufficient(self):
        """Payments below half the grand total are refused"""
        payload = self._payload(payment={'amount': '999.99', 'method': 'Cash'})
        response = self.client.post('/api/v1/reservations/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Payment is insufficient', response.data['error'])
        self.assertEqual(Reservation.objects.count(), 0)

    def test_past_date_rejected(self):
        """Reservations cannot be placed for past dates"""
        response = self.client.post('/api/v1/reservations/',
                                    self._payload(reserve_date=days_from_today(-1).isoformat()), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_reservation_rejected(self):
        """At least one item or package is needed"""
        response = self.client.post('/api/v1/reservations/', self._payload(item_reservations=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_variation(self):
        """Lines must reference existing variations"""
        payload = self._payload(item_reservations=[{'variation_id': 999999, 'quantity': 1}])
        response = self.client.post('/api/v1/reservations/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_date_conflict(self):
        """Units already reserved around the date are unavailable"""
        TestDataFactory.create_reservation(reserve_date=days_from_today(8), status='Confirmed',
                                           variation=self.variation, quantity=5)
        response = self.client.post('/api/v1/reservations/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['conflicting_items'][0]['available'], 0)

    def test_package_custom_role_books_appointment(self):
        """Custom package roles get a pending appointment on the package appointment date"""
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        payload = self._payload(
            item_reservations=[],
            package_reservations=[{
                'package_id': package.id,
                'motif_name': 'Silver',
                'fulfillment_preview': [
                    {'role': 'Bride', 'variation_id': self.variation.id},
                    {'role': 'Groom', 'is_custom': True, 'notes': 'Prefers pina cloth'},
                ],
            }],
            payment={'amount': '6000.00', 'method': 'Bank Transfer'},
            package_appointment_date=days_from_today(3).isoformat(),
            package_appointment_block='afternoon',
        )
        response = self.client.post('/api/v1/reservations/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['financials']['grand_total'], Decimal('12000.00'))

        appointment = Appointment.objects.get()
        self.assertEqual(appointment.source_reservation_id, response.data['id'])
        self.assertEqual(appointment.appointment_date, days_from_today(3))
        self.assertEqual(appointment.time_block, 'afternoon')
        self.assertEqual(FulfillmentPreview.objects.get(role='Groom').linked_appointment, appointment)

    def test_package_appointment_on_closed_day(self):
        """A closed package appointment date rejects the reservation"""
        package = TestDataFactory.create_package(roles=('Groom',))
        Unavailability.objects.create(date=days_from_today(3), reason='Town fiesta')
        payload = self._payload(
            item_reservations=[],
            package_reservations=[{'package_id': package.id, 'fulfillment_preview': [{'role': 'Groom', 'is_custom': True}]}],
            payment={'amount': '6000.00', 'method': 'Cash'},
            package_appointment_date=days_from_today(3).isoformat(),
        )
        response = self.client.post('/api/v1/reservations/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Town fiesta', response.data['error'])
        self.assertEqual(Reservation.objects.count(), 0)

    def test_custom_roles_cannot_overbook_day(self):
        """Every custom role needs its own slot on the package appointment date"""
        settings = ShopSettings.load()
        settings.appointment_slots_per_day = 1
        settings.save()
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        payload = self._payload(
            item_reservations=[],
            package_reservations=[{
                'package_id': package.id,
                'fulfillment_preview': [
                    {'role': 'Bride', 'is_custom': True},
                    {'role': 'Groom', 'is_custom': True},
                ],
            }],
            payment={'amount': '6000.00', 'method': 'Cash'},
            package_appointment_date=days_from_today(3).isoformat(),
        )
        response = self.client.post('/api/v1/reservations/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('fully booked', response.data['error'])
        self.assertEqual(Reservation.objects.count(), 0)
        self.assertEqual(Appointment.objects.filter(appointment_date=days_from_today(3)).count(), 0)

    def test_list_requires_staff(self):
        """Listing is for staff only"""
        response = self.client.get('/api/v1/reservations/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_paginated(self):
        """Staff see reservations page by page"""
        for _ in range(3):
            TestDataFactory.create_reservation(variation=self.variation)
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/reservations/?page=2&limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['current_page'], 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(len(response.data['reservations']), 1)


class ReservationManagementTests(TestCase):
    """Test staff actions on reservations"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.variation = TestDataFactory.create_variation(quantity=5)
        self.reservation = TestDataFactory.create_reservation(variation=self.variation, quantity=5)

    def _url(self, action=''):
        return f'/api/v1/reservations/{self.reservation.id}/{action}'

    def test_confirm(self):
        """Pending reservations can be confirmed once"""
        response = self.client.put(self._url('confirm/'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Confirmed')

        response = self.client.put(self._url('confirm/'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel(self):
        """Cancelling needs a reason and leaves stock alone"""
        response = self.client.put(self._url('cancel/'), {'reason': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(self._url('cancel/'), {'reason': 'Wedding moved abroad'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Cancelled')
        self.assertEqual(response.data['cancellation_reason'], 'Wedding moved abroad')
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 5)

        response = self.client.put(self._url('cancel/'), {'reason': 'Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reschedule_ignores_own_lines(self):
        """A reservation does not conflict with itself when moved"""
        new_date = days_from_today(10)
        response = self.client.put(self._url('reschedule/'), {'new_date': new_date.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['reserve_date'], str(new_date))

    def test_reschedule_conflict(self):
        """Other bookings in the new window block the move"""
        TestDataFactory.create_reservation(reserve_date=days_from_today(12), status='Confirmed',
                                           variation=self.variation, quantity=1)
        new_date = days_from_today(10)

        response = self.client.get(self._url(f'check-availability/?date={new_date.isoformat()}'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_available'])
        self.assertEqual(response.data['conflicting_items'][0]['available'], 4)

        response = self.client.put(self._url('reschedule/'), {'new_date': new_date.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.reserve_date, days_from_today(7))

    def test_reschedule_closed_reservation(self):
        """Completed reservations cannot move"""
        Reservation.objects.filter(pk=self.reservation.pk).update(status='Completed')
        response = self.client.put(self._url('reschedule/'), {'new_date': days_from_today(10).isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_discount(self):
        """Discount edits flow into the financials"""
        response = self.client.patch(self._url(), {'shop_discount': '200.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['financials']['shop_discount'], Decimal('200.00'))
        self.assertEqual(response.data['financials']['items_total'], Decimal('7300.00'))

    def test_update_customer(self):
        """Customer edits need a complete address"""
        response = self.client.put(self._url('customer/'), {'name': 'Ana'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Incomplete customer information provided.')

        response = self.client.put(self._url('customer/'), {**CUSTOMER_INFO, 'name': 'ana reyes'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customer_info']['name'], 'Ana Reyes')

    def test_requires_permission(self):
        """Staff without manage_reservations cannot act on reservations"""
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(permissions=['manage_rentals']))
        response = client.put(self._url('confirm/'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AppointmentTests(TestCase):
    """Test appointment booking and capacity"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.day = days_from_today(5)

    def _book(self, time_block='morning', day=None):
        data = {
            'customer_info': CUSTOMER_INFO,
            'appointment_date': (day or self.day).isoformat(),
            'time_block': time_block,
        }
        return self.client.post('/api/v1/appointments/', data, format='json')

    def test_public_booking(self):
        """Anonymous customers can book an appointment"""
        response = self._book()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['id'].startswith('APT-'))
        self.assertEqual(response.data['status'], 'Pending')

    def test_past_date_rejected(self):
        """Past dates cannot be booked"""
        response = self._book(day=days_from_today(-2))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_day_capacity(self):
        """Once the daily capacity is used the day is full"""
        shop = ShopSettings.load()
        shop.appointment_slots_per_day = 2
        shop.save()
        TestDataFactory.create_appointment(appointment_date=self.day, time_block='morning')
        TestDataFactory.create_appointment(appointment_date=self.day, time_block='afternoon')

        response = self._book()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('fully booked', response.data['error'])

    def test_cancelled_appointments_free_capacity(self):
        """Cancelled appointments do not count"""
        shop = ShopSettings.load()
        shop.appointment_slots_per_day = 1
        shop.save()
        TestDataFactory.create_appointment(appointment_date=self.day, status='Cancelled')
        self.assertEqual(self._book().status_code, status.HTTP_201_CREATED)

    def test_full_day_closure(self):
        """Closed days take no appointments"""
        Unavailability.objects.create(date=self.day, reason='Inventory count')
        response = self._book()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Inventory count', response.data['error'])

    def test_half_day_closure(self):
        """Half-day closures only shut the afternoon"""
        Unavailability.objects.create(date=self.day, reason='Staff training', is_full_day=False)
        self.assertEqual(self._book('morning').status_code, status.HTTP_201_CREATED)
        self.assertEqual(self._book('afternoon').status_code, status.HTTP_400_BAD_REQUEST)

    def test_booked_slots(self):
        """Booked slot counts are public"""
        TestDataFactory.create_appointment(appointment_date=self.day, time_block='morning')
        TestDataFactory.create_appointment(appointment_date=self.day, time_block='afternoon')
        TestDataFactory.create_appointment(appointment_date=self.day, time_block='afternoon')

        response = self.client.get(f'/api/v1/appointments/booked-slots/?date={self.day.isoformat()}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts'], {'morning': 1, 'afternoon': 2})
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['capacity'], 8)
        self.assertFalse(response.data['is_full'])

    def test_booked_slots_needs_date(self):
        response = self.client.get('/api/v1/appointments/booked-slots/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_requires_staff(self):
        response = self.client.get('/api/v1/appointments/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AppointmentManagementTests(TestCase):
    """Test staff edits, cancellation and processing of appointments"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.appointment = TestDataFactory.create_appointment()

    def _url(self, action=''):
        return f'/api/v1/appointments/{self.appointment.id}/{action}'

    def test_update_time_block(self):
        """Moving to another block re-checks the slot"""
        response = self.client.patch(self._url(), {'time_block': 'afternoon'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['time_block'], 'afternoon')

    def test_update_onto_closed_day(self):
        """Appointments cannot be moved onto a closed day"""
        Unavailability.objects.create(date=days_from_today(6), reason='Holiday')
        response = self.client.patch(self._url(), {'appointment_date': days_from_today(6).isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_cannot_cancel(self):
        """Cancellation goes through the cancel action"""
        response = self.client.patch(self._url(), {'status': 'Cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_confirm_via_update(self):
        response = self.client.patch(self._url(), {'status': 'Confirmed'}, format='json')
        self.assertEqual(response.data['status'], 'Confirmed')

    def test_cancel(self):
        """Cancelling needs a reason"""
        response = self.client.put(self._url('cancel/'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(self._url('cancel/'), {'reason': 'Customer unreachable'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Cancelled')

    def test_process_creates_rental(self):
        """Processing a walk-in appointment opens a pending rental with the tailored piece"""
        data = {
            'custom_item': {
                'name': 'barong tagalog',
                'price': '3500.00',
                'tailoring_type': 'Tailored for Purchase',
                'measurements': {'chest': '40', 'waist': '34'},
                'materials': ['Pina'],
            },
        }
        response = self.client.put(self._url('process/'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'Pending')
        self.assertEqual(response.data['customer_info']['name'], CUSTOMER_INFO['name'])
        custom = response.data['custom_items'][0]
        self.assertEqual(custom['name'], 'Barong Tagalog')
        self.assertEqual(custom['source_appointment'], self.appointment.id)

        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.status, 'Completed')
        self.assertEqual(self.appointment.rental_id, response.data['id'])

    def test_process_fills_package_role(self):
        """A reservation appointment fills the matching custom role on its rental"""
        variation = TestDataFactory.create_variation()
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        reservation = TestDataFactory.create_reservation(status='Completed', package=package,
                                                         assignments={'Bride': variation, 'Groom': None})
        rental = TestDataFactory.create_rental(user=self.user, source_reservation=reservation)
        TestDataFactory.add_rental_package(rental, package, {'Bride': variation, 'Groom': None})
        appointment = TestDataFactory.create_appointment(source_reservation=reservation, rental=rental)
        FulfillmentPreview.objects.filter(role='Groom').update(linked_appointment=appointment)

        data = {'custom_item': {'name': 'Groom Barong', 'price': '3000.00'}}
        response = self.client.put(f'/api/v1/appointments/{appointment.id}/process/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], rental.id)

        groom = PackageFulfillment.objects.get(rental_package__rental=rental, role='Groom')
        self.assertEqual(groom.custom_item.name, 'Groom Barong')
        self.assertTrue(groom.is_assigned)
        self.assertEqual(Rental.objects.count(), 1)

    def test_process_completed_appointment(self):
        """Completed appointments cannot be processed again"""
        Appointment.objects.filter(pk=self.appointment.pk).update(status='Completed')
        data = {'custom_item': {'name': 'Terno', 'price': '2000.00'}}
        response = self.client.put(self._url('process/'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Rental.objects.count(), 0)

    def test_process_requires_rental_permission(self):
        """Processing also needs manage_rentals"""
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(permissions=['manage_appointments']))
        data = {'custom_item': {'name': 'Terno', 'price': '2000.00'}}
        response = client.put(self._url('process/'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UnavailabilityTests(TestCase):
    """Test shop closure management"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_list_upcoming(self):
        """Only today and later closures are listed"""
        Unavailability.objects.create(date=days_from_today(-3), reason='Past closure')
        response = self.client.post('/api/v1/unavailability/',
                                    {'date': days_from_today(4).isoformat(), 'reason': 'Holy Week'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_full_day'])

        response = self.client.get('/api/v1/unavailability/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['reason'], 'Holy Week')

    def test_reason_required(self):
        response = self.client.post('/api/v1/unavailability/',
                                    {'date': days_from_today(4).isoformat(), 'reason': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_one_closure_per_date(self):
        Unavailability.objects.create(date=days_from_today(4), reason='Holiday')
        response = self.client.post('/api/v1/unavailability/',
                                    {'date': days_from_today(4).isoformat(), 'reason': 'Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_dates(self):
        """The closed-date list is public"""
        Unavailability.objects.create(date=days_from_today(4), reason='Holiday')
        response = APIClient().get('/api/v1/unavailability/dates/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [str(days_from_today(4))])

    def test_by_date(self):
        """Lookup by date returns the record or null"""
        closure = Unavailability.objects.create(date=days_from_today(4), reason='Holiday')
        response = self.client.get(f'/api/v1/unavailability/by-date/{days_from_today(4).isoformat()}/')
        self.assertEqual(response.data['id'], closure.id)

        response = self.client.get(f'/api/v1/unavailability/by-date/{days_from_today(5).isoformat()}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data)

    def test_update_and_delete(self):
        closure = Unavailability.objects.create(date=days_from_today(4), reason='Holiday')
        url = f'/api/v1/unavailability/{closure.id}/'

        response = self.client.put(url, {'reason': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(url, {'reason': 'Regional holiday'}, format='json')
        self.assertEqual(response.data['reason'], 'Regional holiday')

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Unavailability.objects.exists())


class TrackRequestTests(TestCase):
    """Test public lookup of reservations and appointments"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_track_reservation(self):
        reservation = TestDataFactory.create_reservation(variation=TestDataFactory.create_variation())
        response = self.client.get(f'/api/v1/track/{reservation.id.lower()}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['type'], 'reservation')
        self.assertEqual(response.data['data']['id'], reservation.id)

    def test_track_appointment(self):
        appointment = TestDataFactory.create_appointment()
        response = self.client.get(f'/api/v1/track/{appointment.id}/')
        self.assertEqual(response.data['type'], 'appointment')
        self.assertEqual(response.data['data']['time_block'], 'morning')

    def test_track_unknown(self):
        response = self.client.get('/api/v1/track/KSL_12345678/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'],
                         'No request found with the provided ID. Please check the ID and try again.')
