"""
Test suite for the rentals module
Tests: financials, rental creation, lifecycle processing, line edits, returns, conversions and reminders
"""
from datetime import timedelta
from io import StringIO
from decimal import Decimal

from django.core import mail
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from kasal.core.models import AuditLog
from kasal.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CUSTOMER_INFO
from kasal.catalog.models import Item, ItemVariation
from kasal.inventory.models import DamagedItem
from kasal.rentals.financials import calculate_financials
from kasal.rentals.models import Rental, RentalItem, CustomTailoringItem, PackageFulfillment, Payment


class FinancialsTests(TestCase):
    """Test the pricing and deposit rules"""

    def test_single_item_deposit_is_capped(self):
        """Single items deposit min(price, 500) per unit"""
        result = calculate_financials(single_items=[
            {'price': Decimal('1500.00'), 'quantity': 2},
            {'price': Decimal('300.00'), 'quantity': 1},
        ])
        self.assertEqual(result['subtotal'], Decimal('3300.00'))
        self.assertEqual(result['required_deposit'], Decimal('1300.00'))
        self.assertEqual(result['grand_total'], Decimal('4600.00'))

    def test_package_and_rent_back_deposits(self):
        """Packages deposit 2000 each and rent-back pieces deposit their full price"""
        result = calculate_financials(
            packages=[{'price': Decimal('10000.00'), 'quantity': 1}],
            custom_items=[
                {'price': Decimal('3000.00'), 'quantity': 1, 'tailoring_type': 'Tailored for Rent-Back'},
                {'price': Decimal('2500.00'), 'quantity': 1, 'tailoring_type': 'Tailored for Purchase'},
            ],
        )
        self.assertEqual(result['subtotal'], Decimal('15500.00'))
        self.assertEqual(result['required_deposit'], Decimal('5000.00'))
        self.assertEqual(result['deposit_amount'], Decimal('5000.00'))

    def test_stored_deposit_overrides_required(self):
        """A stored deposit above zero replaces the required deposit"""
        result = calculate_financials(
            single_items=[{'price': Decimal('1000.00')}],
            shop_discount=Decimal('100.00'),
            deposit_amount=Decimal('200.00'),
            total_paid=Decimal('500.00'),
        )
        self.assertEqual(result['items_total'], Decimal('900.00'))
        self.assertEqual(result['deposit_amount'], Decimal('200.00'))
        self.assertEqual(result['grand_total'], Decimal('1100.00'))
        self.assertEqual(result['remaining_balance'], Decimal('600.00'))

    def test_empty_rental(self):
        """No lines means every figure is zero"""
        result = calculate_financials()
        self.assertEqual(result['grand_total'], Decimal('0.00'))
        self.assertEqual(result['remaining_balance'], Decimal('0.00'))


class RentalCreateTests(TestCase):
    """Test creating rentals via the API"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.variation = TestDataFactory.create_variation(quantity=5, price=Decimal('1500.00'))

    def test_create_rental_decrements_stock(self):
        """Creating a rental takes its units off the shelf"""
        data = {
            'customer_info': CUSTOMER_INFO,
            'single_items': [{'variation_id': self.variation.id, 'quantity': 2}],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['id'].startswith('KSL_'))
        self.assertEqual(response.data['status'], 'Pending')
        self.assertEqual(response.data['financials']['subtotal'], Decimal('3000.00'))
        self.assertEqual(response.data['financials']['required_deposit'], Decimal('1000.00'))

        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 3)

        rental = Rental.objects.get(pk=response.data['id'])
        self.assertEqual(rental.rental_start_date, timezone.localdate())
        self.assertEqual(rental.rental_end_date, timezone.localdate() + timedelta(days=3))
        self.assertEqual(rental.created_by, self.user)
        self.assertTrue(AuditLog.objects.filter(model_name='Rental', object_id=rental.id, action='create').exists())

    def test_create_rental_uses_catalogue_price(self):
        """Client-supplied prices are ignored for inventory lines"""
        data = {
            'customer_info': CUSTOMER_INFO,
            'single_items': [{'variation_id': self.variation.id, 'quantity': 1, 'price': '1.00'}],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(RentalItem.objects.get(rental_id=response.data['id']).price, Decimal('1500.00'))

    def test_create_rental_failure_rolls_back_stock(self):
        """An unknown package after the stock is taken aborts the whole rental"""
        data = {
            'customer_info': CUSTOMER_INFO,
            'single_items': [{'variation_id': self.variation.id, 'quantity': 2}],
            'package_rents': [{'package_id': 999999}],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('999999', response.data['error'])
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 5)
        self.assertFalse(Rental.objects.exists())

    def test_create_rental_without_lines(self):
        """A rental must have at least one line"""
        response = self.client.post('/api/v1/rentals/', {'customer_info': CUSTOMER_INFO}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)
        self.assertEqual(Rental.objects.count(), 0)

    def test_create_rental_unavailable(self):
        """Requesting more than the owned stock reports the conflicting lines"""
        data = {
            'customer_info': CUSTOMER_INFO,
            'single_items': [{'variation_id': self.variation.id, 'quantity': 6}],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['conflicting_items'][0]['requested'], 6)
        self.assertEqual(response.data['conflicting_items'][0]['available'], 5)
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 5)

    def test_create_rental_blocked_by_overlapping_reservation(self):
        """A confirmed reservation in the window counts against availability"""
        TestDataFactory.create_reservation(
            reserve_date=timezone.localdate() + timedelta(days=1), status='Confirmed',
            variation=self.variation, quantity=4,
        )
        data = {
            'customer_info': CUSTOMER_INFO,
            'single_items': [{'variation_id': self.variation.id, 'quantity': 2}],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['conflicting_items'][0]['available'], 1)

    def test_create_rental_insufficient_shelf_stock(self):
        """Units out with a later rental are owned but not on the shelf"""
        variation = TestDataFactory.create_variation(quantity=1)
        later = TestDataFactory.create_rental(start_date=timezone.localdate() + timedelta(days=10))
        TestDataFactory.add_rental_item(later, variation, quantity=1)

        data = {
            'customer_info': CUSTOMER_INFO,
            'single_items': [{'variation_id': variation.id, 'quantity': 1}],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('Available: 0, Requested: 1', response.data['error'])
        self.assertEqual(len(response.data['shortages']), 1)
        self.assertEqual(Rental.objects.count(), 1)

    def test_create_rental_with_package_and_rent_back(self):
        """Package roles take stock; custom roles link to the custom piece"""
        package = TestDataFactory.create_package()
        data = {
            'customer_info': CUSTOMER_INFO,
            'rental_start_date': (timezone.localdate() + timedelta(days=1)).isoformat(),
            'package_rents': [{
                'package_id': package.id,
                'motif_name': 'Silver',
                'motif_hex': '#C0C0C0',
                'fulfillment': [
                    {'role': 'Bride', 'wearer_name': 'Maria', 'variation_id': self.variation.id},
                    {'role': 'Groom', 'is_custom': True, 'custom_item_reference': 'CUST-GROOM001'},
                ],
            }],
            'custom_items': [{
                'reference': 'CUST-GROOM001',
                'name': 'Groom Barong',
                'price': '3000.00',
                'tailoring_type': 'Tailored for Rent-Back',
            }],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['financials']['subtotal'], Decimal('13000.00'))
        self.assertEqual(response.data['financials']['required_deposit'], Decimal('5000.00'))
        self.assertEqual(response.data['financials']['grand_total'], Decimal('18000.00'))

        groom = PackageFulfillment.objects.get(role='Groom')
        self.assertEqual(groom.custom_item.reference, 'CUST-GROOM001')
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 4)

    def test_rent_back_requires_start_date(self):
        """Rent-back pieces need an explicit start date"""
        data = {
            'customer_info': CUSTOMER_INFO,
            'custom_items': [{'name': 'Filipiniana', 'price': '2000.00', 'tailoring_type': 'Tailored for Rent-Back'}],
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_rental_with_payment(self):
        """An initial payment is recorded against the rental"""
        data = {
            'customer_info': CUSTOMER_INFO,
            'single_items': [{'variation_id': self.variation.id, 'quantity': 1}],
            'payment': {'amount': '1000.00', 'method': 'GCash', 'reference_number': 'GC-123'},
        }
        response = self.client.post('/api/v1/rentals/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['financials']['total_paid'], Decimal('1000.00'))
        self.assertEqual(response.data['financials']['remaining_balance'], Decimal('1000.00'))

    def test_list_filters_by_phone_and_status(self):
        """List supports phone and status filters"""
        TestDataFactory.create_rental(customer_info={**CUSTOMER_INFO, 'phone_number': '09990000000'})
        TestDataFactory.create_rental(status='Completed')

        response = self.client.get('/api/v1/rentals/?phone=0999')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/rentals/?status=Completed')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status'], 'Completed')

    def test_requires_permission(self):
        """Staff without manage_rentals are refused"""
        clerk = TestDataFactory.create_user(permissions=['view_dashboard'])
        client = AuthenticatedAPIClient().authenticate_user(clerk)
        response = client.get('/api/v1/rentals/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_requires_authentication(self):
        """Anonymous requests are rejected"""
        self.client.logout()
        response = self.client.get('/api/v1/rentals/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class RentalLifecycleTests(TestCase):
    """Test status transitions, cancellation and deletion"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.variation = TestDataFactory.create_variation(quantity=5)
        self.rental = TestDataFactory.create_rental(user=self.user)
        TestDataFactory.add_rental_item(self.rental, self.variation, quantity=2)

    def _process(self, **data):
        return self.client.put(f'/api/v1/rentals/{self.rental.id}/process/', data, format='json')

    def test_full_lifecycle_restores_stock(self):
        """Pending -> To Pickup -> To Return -> Returned ends Completed with stock back"""
        self.assertEqual(self._process(status='To Pickup').data['status'], 'To Pickup')

        response = self._process(status='To Return')
        self.assertEqual(response.data['status'], 'To Return')
        self.assertEqual(response.data['rental_start_date'], str(timezone.localdate()))
        self.assertEqual(response.data['rental_end_date'], str(timezone.localdate() + timedelta(days=3)))

        response = self._process(status='Returned')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Completed')
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 5)

    def test_purchase_only_rental_completes_at_pickup(self):
        """A rental with only purchased custom pieces skips To Return"""
        rental = TestDataFactory.create_rental(status='To Pickup')
        TestDataFactory.add_custom_item(rental)
        response = self.client.put(f'/api/v1/rentals/{rental.id}/process/', {'status': 'To Return'}, format='json')
        self.assertEqual(response.data['status'], 'Completed')
        self.assertEqual(response.data['rental_start_date'], str(timezone.localdate()))
        self.assertEqual(response.data['rental_end_date'], str(timezone.localdate()))

    def test_invalid_transition(self):
        """Skipping states is rejected"""
        response = self._process(status='Completed')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.rental.refresh_from_db()
        self.assertEqual(self.rental.status, 'Pending')

    def test_cancel_through_process_rejected(self):
        """Cancellation has its own endpoint"""
        response = self._process(status='Cancelled')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_process_updates_money(self):
        """Discount, deposit and payments can be recorded while processing"""
        response = self._process(shop_discount='100.00', deposit_amount='800.00',
                                 payment={'amount': '500.00', 'method': 'Cash'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        financials = response.data['financials']
        self.assertEqual(financials['shop_discount'], Decimal('100.00'))
        self.assertEqual(financials['deposit_amount'], Decimal('800.00'))
        self.assertEqual(financials['total_paid'], Decimal('500.00'))
        self.assertTrue(AuditLog.objects.filter(action='payment_add', object_id=self.rental.id).exists())

    def test_reimbursement_cannot_exceed_deposit(self):
        """Deposit reimbursed is bounded by the deposit"""
        response = self._process(deposit_reimbursed='5000.00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_requires_reason(self):
        """A reason must be given"""
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/cancel/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_restores_stock(self):
        """Cancelling gives every held unit back"""
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/cancel/', {'reason': 'Event postponed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Cancelled')
        self.assertEqual(response.data['cancellation_reason'], 'Event postponed')
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 5)

    def test_cannot_cancel_to_return(self):
        """Rentals already with the customer cannot be cancelled"""
        Rental.objects.filter(pk=self.rental.pk).update(status='To Return')
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/cancel/', {'reason': 'Too late'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_restores_stock(self):
        """Deleting an active rental gives its stock back"""
        response = self.client.delete(f'/api/v1/rentals/{self.rental.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Rental.objects.filter(pk=self.rental.pk).exists())
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 5)

    def test_delete_completed_keeps_stock(self):
        """Closed rentals hold nothing, so deleting them leaves stock alone"""
        Rental.objects.filter(pk=self.rental.pk).update(status='Completed')
        self.client.delete(f'/api/v1/rentals/{self.rental.id}/')
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 3)

    def test_reschedule(self):
        """Rescheduling moves the window when stock is free"""
        new_start = timezone.localdate() + timedelta(days=14)
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/reschedule/',
                                   {'new_start_date': new_start.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['rental_start_date'], str(new_start))
        self.assertEqual(response.data['rental_end_date'], str(new_start + timedelta(days=3)))

    def test_reschedule_conflict(self):
        """Another booking in the new window blocks the move"""
        new_start = timezone.localdate() + timedelta(days=14)
        TestDataFactory.create_reservation(reserve_date=new_start, status='Confirmed', variation=self.variation, quantity=4)
        response = self.client.get(f'/api/v1/rentals/{self.rental.id}/check-reschedule/?date={new_start.isoformat()}')
        self.assertFalse(response.data['is_available'])

        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/reschedule/',
                                   {'new_start_date': new_start.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.rental.refresh_from_db()
        self.assertEqual(self.rental.rental_start_date, timezone.localdate())

    def test_reschedule_invalid_date(self):
        """A malformed date is a 400"""
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/reschedule/', {'new_start_date': 'soon'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class RentalLineTests(TestCase):
    """Test adding, editing and removing rental lines"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.item = TestDataFactory.create_item(variations=[('Ivory', 'M', 5), ('Ivory', 'L', 5)])
        self.medium = self.item.variations.get(size='M')
        self.large = self.item.variations.get(size='L')
        self.rental = TestDataFactory.create_rental(user=self.user)
        self.line = TestDataFactory.add_rental_item(self.rental, self.medium, quantity=2)

    def _stock(self, variation):
        return ItemVariation.objects.get(pk=variation.pk).quantity

    def test_add_items_merges_and_decrements(self):
        """Adding a variation already on the rental increases that line"""
        data = {'single_items': [{'variation_id': self.medium.id, 'quantity': 1}]}
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/add-items/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['quantity'], 3)
        self.assertEqual(self._stock(self.medium), 2)

    def test_add_custom_item_needs_no_stock(self):
        """Custom pieces can be added without touching inventory"""
        data = {'custom_items': [{'name': 'Terno', 'price': '4500.00'}]}
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/add-items/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['custom_items']), 1)
        self.assertTrue(response.data['custom_items'][0]['reference'].startswith('CUST-'))

    def test_add_items_to_closed_rental(self):
        """Only Pending and To Pickup rentals take new lines"""
        Rental.objects.filter(pk=self.rental.pk).update(status='To Return')
        data = {'single_items': [{'variation_id': self.large.id, 'quantity': 1}]}
        response = self.client.put(f'/api/v1/rentals/{self.rental.id}/add-items/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self._stock(self.large), 5)

    def test_update_quantity_applies_delta(self):
        """Raising and lowering quantity moves only the difference"""
        url = f'/api/v1/rentals/{self.rental.id}/items/{self.line.id}/'
        self.client.put(url, {'quantity': 4}, format='json')
        self.assertEqual(self._stock(self.medium), 1)
        self.client.put(url, {'quantity': 1}, format='json')
        self.assertEqual(self._stock(self.medium), 4)

    def test_update_quantity_beyond_stock(self):
        """Increases are stock-checked"""
        url = f'/api/v1/rentals/{self.rental.id}/items/{self.line.id}/'
        response = self.client.put(url, {'quantity': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(RentalItem.objects.get(pk=self.line.pk).quantity, 2)

    def test_swap_variation(self):
        """Swapping sizes returns the old units and takes the new ones"""
        url = f'/api/v1/rentals/{self.rental.id}/items/{self.line.id}/'
        response = self.client.put(url, {'quantity': 2, 'variation_id': self.large.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['size'], 'L')
        self.assertEqual(self._stock(self.medium), 5)
        self.assertEqual(self._stock(self.large), 3)

    def test_swap_to_other_item_rejected(self):
        """A line cannot become a different item"""
        other = TestDataFactory.create_variation()
        url = f'/api/v1/rentals/{self.rental.id}/items/{self.line.id}/'
        response = self.client.put(url, {'quantity': 2, 'variation_id': other.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_remove_item_restores_stock(self):
        """Removing a line gives its units back"""
        response = self.client.delete(f'/api/v1/rentals/{self.rental.id}/items/{self.line.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])
        self.assertEqual(self._stock(self.medium), 5)

    def test_package_fulfillment_update(self):
        """Reassigning a role moves stock by the difference"""
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        rental_package = TestDataFactory.add_rental_package(self.rental, package, {'Bride': self.large, 'Groom': None})
        self.assertEqual(self._stock(self.large), 4)

        data = {
            'fulfillment': [
                {'role': 'Bride', 'variation_id': self.medium.id},
                {'role': 'Groom', 'is_custom': True, 'custom_item_reference': 'CUST-GROOM002'},
            ],
            'custom_items': [{'reference': 'CUST-GROOM002', 'name': 'Groom Suit', 'price': '2500.00'}],
        }
        url = f'/api/v1/rentals/{self.rental.id}/packages/{rental_package.id}/'
        response = self.client.put(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._stock(self.large), 5)
        self.assertEqual(self._stock(self.medium), 2)
        fulfillments = response.data['packages'][0]['fulfillments']
        self.assertTrue(all(row['is_assigned'] for row in fulfillments))

    def test_package_update_failure_rolls_back_stock(self):
        """A bad custom reference after the stock move leaves both variations untouched"""
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        rental_package = TestDataFactory.add_rental_package(self.rental, package, {'Bride': self.large, 'Groom': None})

        data = {
            'fulfillment': [
                {'role': 'Bride', 'variation_id': self.medium.id},
                {'role': 'Groom', 'is_custom': True, 'custom_item_reference': 'CUST-MISSING1'},
            ],
        }
        url = f'/api/v1/rentals/{self.rental.id}/packages/{rental_package.id}/'
        response = self.client.put(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self._stock(self.large), 4)
        self.assertEqual(self._stock(self.medium), 3)
        self.assertEqual(PackageFulfillment.objects.get(rental_package=rental_package, role='Bride').variation, self.large)

    def test_package_delete_restores_stock_and_custom_items(self):
        """Removing a package returns assigned units and drops its custom pieces"""
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        rental_package = TestDataFactory.add_rental_package(self.rental, package, {'Bride': self.large, 'Groom': None})
        custom = TestDataFactory.add_custom_item(self.rental, name='Groom Suit')
        PackageFulfillment.objects.filter(rental_package=rental_package, role='Groom').update(custom_item=custom)

        response = self.client.delete(f'/api/v1/rentals/{self.rental.id}/packages/{rental_package.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['packages'], [])
        self.assertEqual(self._stock(self.large), 5)
        self.assertFalse(CustomTailoringItem.objects.filter(pk=custom.pk).exists())

    def test_update_customer(self):
        """Customer edits need a full address"""
        url = f'/api/v1/rentals/{self.rental.id}/customer/'
        response = self.client.put(url, {'name': 'Juan', 'phone_number': '0917'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        data = {**CUSTOMER_INFO, 'name': 'juan dela cruz'}
        response = self.client.put(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customer_info']['name'], 'Juan Dela Cruz')

    def test_update_and_delete_custom_item(self):
        """Custom pieces can be edited and removed while the rental is open"""
        custom = TestDataFactory.add_custom_item(self.rental)
        url = f'/api/v1/rentals/{self.rental.id}/custom-items/{custom.id}/'
        response = self.client.put(url, {'measurements': {'chest': '40'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CustomTailoringItem.objects.get(pk=custom.pk).measurements, {'chest': '40'})

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['custom_items'], [])

    def test_pre_pickup_validation(self):
        """Incomplete roles and unmeasured custom pieces are reported"""
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        TestDataFactory.add_rental_package(self.rental, package, {'Bride': self.large, 'Groom': None})
        TestDataFactory.add_custom_item(self.rental, name='Barong')

        response = self.client.get(f'/api/v1/rentals/{self.rental.id}/pre-pickup-validation/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        warnings = response.data['warnings']
        self.assertEqual(len(warnings), 3)
        self.assertIn('Groom', warnings[0])


class RentalReturnTests(TestCase):
    """Test processing returns and rent-back conversions"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.variation = TestDataFactory.create_variation(quantity=5)
        self.rental = TestDataFactory.create_rental(user=self.user, status='To Return')
        TestDataFactory.add_rental_item(self.rental, self.variation, quantity=3)

    def _return(self, data):
        return self.client.put(f'/api/v1/rentals/{self.rental.id}/process-return/', data, format='json')

    def test_return_with_damage(self):
        """Damaged units stay off the shelf and get a damage record"""
        response = self._return({'damaged_items': [
            {'variation_id': self.variation.id, 'quantity': 1, 'damage_reason': 'Torn hem'},
        ]})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Completed')

        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 4)
        damaged = DamagedItem.objects.get()
        self.assertEqual(damaged.status, 'Awaiting Repair')
        self.assertEqual(damaged.rental_reference, self.rental.id)
        self.assertEqual(damaged.quantity, 1)

    def test_damaged_quantity_cannot_exceed_rented(self):
        """More damaged units than rented is rejected and nothing changes"""
        response = self._return({'damaged_items': [
            {'variation_id': self.variation.id, 'quantity': 4, 'damage_reason': 'Stained'},
        ]})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(DamagedItem.objects.count(), 0)
        self.rental.refresh_from_db()
        self.assertEqual(self.rental.status, 'To Return')

    def test_damaged_custom_quantity_cannot_exceed_pieces(self):
        """A custom piece cannot report more damaged units than were made"""
        custom = TestDataFactory.add_custom_item(self.rental, quantity=1)
        response = self._return({'damaged_items': [
            {'custom_item_id': custom.id, 'quantity': 2, 'damage_reason': 'Torn seam'},
        ]})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(DamagedItem.objects.count(), 0)
        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 2)

    def test_return_only_from_to_return(self):
        """Pending rentals cannot be checked in"""
        Rental.objects.filter(pk=self.rental.pk).update(status='Pending')
        response = self._return({})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rent_back_flagged_for_conversion(self):
        """Undamaged rent-back pieces are queued for inventory"""
        custom = TestDataFactory.add_custom_item(self.rental, name='Ivory Filipiniana',
                                                 tailoring_type=CustomTailoringItem.RENT_BACK)
        response = self._return({'deposit_reimbursed': '500.00'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pending_inventory_conversion'], [custom.id])
        self.assertEqual(response.data['financials']['deposit_reimbursed'], Decimal('500.00'))

    def test_damaged_rent_back_not_converted(self):
        """A damaged rent-back piece is recorded instead of queued"""
        custom = TestDataFactory.add_custom_item(self.rental, name='Barong', outfit_type='Barong',
                                                 tailoring_type=CustomTailoringItem.RENT_BACK)
        response = self._return({'damaged_items': [{'custom_item_id': custom.id, 'damage_reason': 'Burn mark'}]})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pending_inventory_conversion'], [])
        self.assertEqual(DamagedItem.objects.get().variation_label, 'Custom (Barong)')

    def test_convert_rent_back_to_inventory(self):
        """Converting creates an item and variation and clears the flag"""
        custom = TestDataFactory.add_custom_item(self.rental, name='Ivory Filipiniana', price=Decimal('2500.00'),
                                                 tailoring_type=CustomTailoringItem.RENT_BACK,
                                                 pending_inventory_conversion=True)
        url = f'/api/v1/rentals/{self.rental.id}/pending-conversions/{custom.id}/convert/'
        response = self.client.post(url, {'color_name': 'Ivory', 'size': 'S', 'category': 'Filipiniana'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        item = Item.objects.get(name='Ivory Filipiniana')
        self.assertEqual(item.price, Decimal('2500.00'))
        self.assertEqual(item.variations.get().quantity, 1)
        self.assertFalse(CustomTailoringItem.objects.get(pk=custom.pk).pending_inventory_conversion)

    def test_convert_into_existing_variation(self):
        """An existing item and variation gain the units instead of duplicating"""
        existing = TestDataFactory.create_item(name='Ivory Filipiniana', variations=[('Ivory', 'S', 2)])
        custom = TestDataFactory.add_custom_item(self.rental, name='ivory filipiniana',
                                                 tailoring_type=CustomTailoringItem.RENT_BACK,
                                                 pending_inventory_conversion=True)
        url = f'/api/v1/rentals/{self.rental.id}/pending-conversions/{custom.id}/convert/'
        self.client.post(url, {'color_name': 'Ivory', 'size': 'S'}, format='json')
        self.assertEqual(Item.objects.filter(name__iexact='Ivory Filipiniana').count(), 1)
        self.assertEqual(existing.variations.get().quantity, 3)

    def test_dismiss_conversion(self):
        """Dismissing clears the flag without touching inventory"""
        custom = TestDataFactory.add_custom_item(self.rental, tailoring_type=CustomTailoringItem.RENT_BACK,
                                                 pending_inventory_conversion=True)
        response = self.client.delete(f'/api/v1/rentals/{self.rental.id}/pending-conversions/{custom.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pending_inventory_conversion'], [])

        response = self.client.delete(f'/api/v1/rentals/{self.rental.id}/pending-conversions/{custom.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class RentalFromReservationTests(TestCase):
    """Test converting reservations into rentals"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.variation = TestDataFactory.create_variation(quantity=5, price=Decimal('1500.00'))
        self.package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        self.reservation = TestDataFactory.create_reservation(
            status='Confirmed', variation=self.variation, quantity=2,
            package=self.package, assignments={'Bride': self.variation, 'Groom': None},
        )
        self.payment = Payment.objects.create(reservation=self.reservation, amount=Decimal('7000.00'))

    def test_convert(self):
        """Lines, payments and appointments move to the new rental"""
        appointment = TestDataFactory.create_appointment(source_reservation=self.reservation)
        response = self.client.post('/api/v1/rentals/from-reservation/',
                                    {'reservation_id': self.reservation.id.lower()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        rental = Rental.objects.get(pk=response.data['id'])

        self.assertEqual(rental.source_reservation, self.reservation)
        self.assertEqual(rental.rental_start_date, self.reservation.reserve_date)
        self.assertEqual(rental.rental_end_date, self.reservation.reserve_date + timedelta(days=3))
        self.assertEqual(rental.items.get().quantity, 2)
        self.assertEqual(rental.packages.get().fulfillments.count(), 2)
        self.assertEqual(response.data['financials']['total_paid'], Decimal('7000.00'))

        self.variation.refresh_from_db()
        self.assertEqual(self.variation.quantity, 2)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.status, 'Completed')
        appointment.refresh_from_db()
        self.assertEqual(appointment.rental, rental)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.rental, rental)

    def test_convert_closed_reservation(self):
        """Completed and cancelled reservations cannot be converted"""
        self.reservation.status = 'Cancelled'
        self.reservation.save()
        response = self.client.post('/api/v1/rentals/from-reservation/',
                                    {'reservation_id': self.reservation.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Rental.objects.count(), 0)

    def test_convert_missing_reservation(self):
        """Unknown ids are a 404"""
        response = self.client.post('/api/v1/rentals/from-reservation/', {'reservation_id': 'RES-NOPE0000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_convert_without_stock(self):
        """Conversion fails as a whole when the shelf is short"""
        ItemVariation.objects.filter(pk=self.variation.pk).update(quantity=1)
        response = self.client.post('/api/v1/rentals/from-reservation/',
                                    {'reservation_id': self.reservation.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.status, 'Confirmed')


class ReturnReminderTests(TestCase):
    """Test reminder emails"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_send_reminder(self):
        """A reminder is mailed and the flag set"""
        rental = TestDataFactory.create_rental(status='To Return')
        response = self.client.post(f'/api/v1/rentals/{rental.id}/send-reminder/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['return_reminder_sent'])
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [CUSTOMER_INFO['email']])
        self.assertIn(rental.id, mail.outbox[0].body)

    def test_send_reminder_without_email(self):
        """Rentals without an email address cannot be reminded"""
        rental = TestDataFactory.create_rental(customer_info={**CUSTOMER_INFO, 'email': ''})
        response = self.client.post(f'/api/v1/rentals/{rental.id}/send-reminder/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(len(mail.outbox), 0)

    def test_daily_command(self):
        """The daily job reminds only rentals due today that were not reminded yet"""
        today = timezone.localdate()
        due = TestDataFactory.create_rental(status='To Return', start_date=today - timedelta(days=3), end_date=today)
        TestDataFactory.create_rental(status='To Return', start_date=today - timedelta(days=3), end_date=today,
                                      return_reminder_sent=True)
        TestDataFactory.create_rental(status='To Return', start_date=today, end_date=today + timedelta(days=3))
        TestDataFactory.create_rental(status='To Return', start_date=today - timedelta(days=3), end_date=today,
                                      customer_info={**CUSTOMER_INFO, 'email': ''})

        call_command('send_return_reminders', stdout=StringIO())
        self.assertEqual(len(mail.outbox), 1)
        due.refresh_from_db()
        self.assertTrue(due.return_reminder_sent)

    def test_daily_command_dry_run(self):
        """Dry runs send nothing"""
        today = timezone.localdate()
        TestDataFactory.create_rental(status='To Return', start_date=today - timedelta(days=3), end_date=today)
        call_command('send_return_reminders', '--dry-run', stdout=StringIO())
        self.assertEqual(len(mail.outbox), 0)
