"""
Comprehensive test suite for inventory module
Tests: Stock movements, Date-window availability, Damaged item workflow
"""
from collections import Counter
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from kasal.core.exceptions import BusinessRuleViolation, StockConflict
from kasal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kasal.catalog.models import ItemVariation
from kasal.inventory.availability import check_availability, rental_window
from kasal.inventory.models import DamagedItem
from kasal.inventory.stock import reserve_stock, release_stock, apply_stock_delta


def stock(variation):
    return ItemVariation.objects.get(pk=variation.pk).quantity


class StockMovementTests(TestCase):
    """Test stock decrements and increments"""

    def setUp(self):
        self.first = TestDataFactory.create_variation(quantity=3)
        self.second = TestDataFactory.create_variation(quantity=1)

    def test_reserve_decrements(self):
        reserve_stock(Counter({self.first.id: 2, self.second.id: 1}))
        self.assertEqual(stock(self.first), 1)
        self.assertEqual(stock(self.second), 0)

    def test_reserve_is_all_or_nothing(self):
        """One short line leaves every line untouched"""
        with self.assertRaises(StockConflict) as ctx:
            reserve_stock(Counter({self.first.id: 2, self.second.id: 2}))
        self.assertEqual(len(ctx.exception.extra['shortages']), 1)
        self.assertEqual(ctx.exception.extra['shortages'][0]['variation_id'], self.second.id)
        self.assertEqual(stock(self.first), 3)
        self.assertEqual(stock(self.second), 1)

    def test_reserve_missing_variation(self):
        with self.assertRaises(BusinessRuleViolation):
            reserve_stock(Counter({999999: 1}))

    def test_release_skips_missing_variation(self):
        release_stock(Counter({self.first.id: 2, 999999: 1}))
        self.assertEqual(stock(self.first), 5)

    def test_apply_delta(self):
        apply_stock_delta(Counter({self.first.id: -1, self.second.id: 1}))
        self.assertEqual(stock(self.first), 4)
        self.assertEqual(stock(self.second), 0)


class AvailabilityTests(TestCase):
    """Test window overlap and owned stock arithmetic"""

    def setUp(self):
        self.today = timezone.localdate()
        self.variation = TestDataFactory.create_variation(quantity=4)

    def test_rental_window(self):
        self.assertEqual(rental_window(self.today), (self.today, self.today + timedelta(days=3)))

    def test_free_when_nothing_booked(self):
        result = check_availability(Counter({self.variation.id: 4}), self.today + timedelta(days=20))
        self.assertTrue(result['is_available'])

    def test_units_out_on_other_dates_still_count_as_owned(self):
        """Stock held by a rental outside the window is available for the window"""
        rental = TestDataFactory.create_rental(start_date=self.today)
        TestDataFactory.add_rental_item(rental, self.variation, quantity=3)
        result = check_availability(Counter({self.variation.id: 4}), self.today + timedelta(days=10))
        self.assertTrue(result['is_available'])

    def test_overlapping_rental_blocks(self):
        rental = TestDataFactory.create_rental(start_date=self.today)
        TestDataFactory.add_rental_item(rental, self.variation, quantity=3)
        result = check_availability(Counter({self.variation.id: 2}), self.today + timedelta(days=2))
        self.assertFalse(result['is_available'])
        self.assertEqual(result['conflicting_items'][0]['available'], 1)

    def test_closed_rentals_ignored(self):
        rental = TestDataFactory.create_rental(start_date=self.today, status='Completed')
        TestDataFactory.add_rental_item(rental, self.variation, quantity=3, take_stock=False)
        result = check_availability(Counter({self.variation.id: 4}), self.today)
        self.assertTrue(result['is_available'])

    def test_package_roles_count(self):
        package = TestDataFactory.create_package(roles=('Bride', 'Groom'))
        rental = TestDataFactory.create_rental(start_date=self.today)
        TestDataFactory.add_rental_package(rental, package, {'Bride': self.variation, 'Groom': None})
        result = check_availability(Counter({self.variation.id: 4}), self.today)
        self.assertEqual(result['conflicting_items'][0]['available'], 3)

    def test_reservation_window_overlap(self):
        """Reservations up to a window before the start still overlap"""
        TestDataFactory.create_reservation(reserve_date=self.today + timedelta(days=7), status='Confirmed',
                                           variation=self.variation, quantity=4)
        self.assertFalse(check_availability(Counter({self.variation.id: 1}), self.today + timedelta(days=10))['is_available'])
        self.assertTrue(check_availability(Counter({self.variation.id: 1}), self.today + timedelta(days=11))['is_available'])
        self.assertTrue(check_availability(Counter({self.variation.id: 1}), self.today + timedelta(days=3))['is_available'])

    def test_cancelled_reservation_ignored(self):
        TestDataFactory.create_reservation(reserve_date=self.today, status='Cancelled',
                                           variation=self.variation, quantity=4)
        self.assertTrue(check_availability(Counter({self.variation.id: 4}), self.today)['is_available'])

    def test_exclude_rental(self):
        rental = TestDataFactory.create_rental(start_date=self.today)
        TestDataFactory.add_rental_item(rental, self.variation, quantity=4)
        result = check_availability(Counter({self.variation.id: 4}), self.today + timedelta(days=1),
                                    exclude_rental_id=rental.id)
        self.assertTrue(result['is_available'])

    def test_unknown_variation(self):
        result = check_availability(Counter({999999: 1}), self.today)
        self.assertEqual(result['conflicting_items'][0]['name'], 'Unknown Item')


class DamagedItemAPITests(TestCase):
    """Test the repair workflow"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.variation = TestDataFactory.create_variation(quantity=2)
        self.damaged = DamagedItem.objects.create(
            variation=self.variation,
            item_name=self.variation.item.name,
            variation_label=self.variation.label,
            rental_reference='KSL_DAMAGE01',
            quantity=2,
            damage_reason='Torn sleeve',
        )

    def _url(self, damaged=None):
        return f'/api/v1/damaged-items/{(damaged or self.damaged).id}/'

    def test_list_and_search(self):
        DamagedItem.objects.create(item_name='Other', rental_reference='KSL_OTHER000', damage_reason='Stain')
        response = self.client.get('/api/v1/damaged-items/', {'search': 'damage01'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertTrue(response.data[0]['is_inventory_item'])

        response = self.client.get('/api/v1/damaged-items/', {'status': 'Repaired'})
        self.assertEqual(response.data, [])

    def test_repair_restores_stock(self):
        response = self.client.put(self._url(), {'status': 'Under Repair'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(stock(self.variation), 2)

        response = self.client.put(self._url(), {'status': 'Repaired', 'damage_notes': 'Resewn'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Repaired')
        self.assertEqual(stock(self.variation), 4)

    def test_terminal_status_locked(self):
        self.client.put(self._url(), {'status': 'Disposed'}, format='json')
        response = self.client.put(self._url(), {'status': 'Repaired'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(stock(self.variation), 2)

    def test_repair_deleted_variation(self):
        self.variation.delete()
        response = self.client.put(self._url(), {'status': 'Repaired'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.damaged.refresh_from_db()
        self.assertEqual(self.damaged.status, 'Awaiting Repair')

    def test_custom_item_repair_leaves_stock(self):
        rental = TestDataFactory.create_rental()
        custom = TestDataFactory.add_custom_item(rental)
        damaged = DamagedItem.objects.create(custom_item=custom, item_name=custom.name, damage_reason='Burn')
        response = self.client.put(self._url(damaged), {'status': 'Repaired'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_inventory_item'])

    def test_invalid_status(self):
        response = self.client.put(self._url(), {'status': 'Lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_permission(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(permissions=['manage_rentals']))
        self.assertEqual(client.get('/api/v1/damaged-items/').status_code, status.HTTP_403_FORBIDDEN)
