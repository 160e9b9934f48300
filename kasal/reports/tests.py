"""
Test suite for reports module
Tests: Dashboard statistics
"""
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from kasal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kasal.reports.views import build_dashboard_stats, WEEKDAYS


class DashboardStatsTests(TestCase):
    """Test dashboard aggregates"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.today = timezone.localdate()
        self.variation = TestDataFactory.create_variation(quantity=10, price=Decimal('1500.00'))

    def _rental(self, rental_status, **kwargs):
        rental = TestDataFactory.create_rental(status=rental_status, **kwargs)
        TestDataFactory.add_rental_item(rental, self.variation, quantity=1, take_stock=False)
        return rental

    def test_status_counts_and_sales(self):
        self._rental('Pending')
        self._rental('To Return')
        completed = self._rental('Completed', shop_discount=Decimal('100.00'))

        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats'], {'Pending': 1, 'ToReturn': 1, 'Completed': 1})
        self.assertEqual(response.data['monthly_sales'], Decimal('1400.00'))

        today_name = WEEKDAYS[(timezone.localtime(completed.updated_at).weekday() + 1) % 7]
        self.assertEqual(response.data['weekly_sales_data'], [{'day': today_name, 'total_sales': Decimal('1400.00')}])

    def test_return_queues(self):
        overdue = self._rental('To Return', start_date=self.today - timedelta(days=5),
                               end_date=self.today - timedelta(days=2))
        due_today = self._rental('To Return', start_date=self.today - timedelta(days=3), end_date=self.today)

        stats = build_dashboard_stats(self.today)
        self.assertEqual([row['id'] for row in stats['to_return_orders']], [overdue.id, due_today.id])
        self.assertEqual([row['id'] for row in stats['overdue_orders']], [overdue.id])

    def test_queues_capped_at_five(self):
        for _ in range(7):
            self._rental('To Return', start_date=self.today - timedelta(days=6), end_date=self.today - timedelta(days=1))
        stats = build_dashboard_stats(self.today)
        self.assertEqual(len(stats['to_return_orders']), 5)
        self.assertEqual(len(stats['overdue_orders']), 5)

    def test_results_are_cached(self):
        first = build_dashboard_stats(self.today)
        self._rental('Pending')
        self.assertEqual(build_dashboard_stats(self.today), first)

        cache.clear()
        self.assertEqual(build_dashboard_stats(self.today)['stats'], {'Pending': 1})

    def test_requires_permission(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(permissions=['manage_rentals']))
        self.assertEqual(client.get('/api/v1/dashboard/stats/').status_code, status.HTTP_403_FORBIDDEN)

        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(permissions=['view_dashboard']))
        self.assertEqual(client.get('/api/v1/dashboard/stats/').status_code, status.HTTP_200_OK)
