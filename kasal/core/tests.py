"""
Comprehensive test suite for core module
Tests: Authentication, Users, Roles, Shop settings, Audit logs, Payload sanitising
"""
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from kasal.core.cache_utils import get_cached_shop_settings
from kasal.core.models import User, Role, Permission, ShopSettings, AuditLog
from kasal.core.permissions import PERMISSION_CATALOGUE
from kasal.core.sanitizers import sanitize_payload, title_case
from kasal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kasal.core.utils import create_audit_log, parse_date


class AuthenticationTests(TestCase):
    """Test JWT login and the current-user endpoint"""

    def setUp(self):
        self.client = APIClient()
        self.user = TestDataFactory.create_user(username='counter', password='testpass123',
                                                permissions=['manage_rentals'])

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'counter', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['permissions'], ['manage_rentals'])

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'counter', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_suspended_user_cannot_login(self):
        """Accounts that are not active are refused a token"""
        self.user.status = 'suspended'
        self.user.save()
        response = self.client.post('/api/v1/auth/login/', {'username': 'counter', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'counter')

    def test_change_password(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        data = {'current_password': 'testpass123', 'new_password': 'Sampaguita#2024'}
        response = client.post('/api/v1/auth/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Sampaguita#2024'))

    def test_change_password_wrong_current(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        data = {'current_password': 'wrong', 'new_password': 'Sampaguita#2024'}
        response = client.post('/api/v1/auth/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class UserAndRoleTests(TestCase):
    """Test staff account and role management"""

    def setUp(self):
        self.admin = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_user_with_role(self):
        role = TestDataFactory.create_role(name='Counter', permissions=['manage_rentals'])
        data = {
            'username': 'newstaff',
            'email': 'newstaff@test.com',
            'password': 'Sampaguita#2024',
            'password_confirm': 'Sampaguita#2024',
            'role': role.id,
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role_name'], 'Counter')

        user = User.objects.get(username='newstaff')
        self.assertTrue(user.has_role_permission('manage_rentals'))
        self.assertFalse(user.has_role_permission('manage_users'))

    def test_password_mismatch(self):
        data = {'username': 'x', 'password': 'Sampaguita#2024', 'password_confirm': 'Other#2024x'}
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_suspending_user_deactivates_login(self):
        user = TestDataFactory.create_user(permissions=[])
        response = self.client.patch(f'/api/v1/users/{user.id}/', {'status': 'suspended'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertFalse(user.is_active)

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_user(self):
        user = TestDataFactory.create_user(permissions=[])
        response = self.client.delete(f'/api/v1/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(AuditLog.objects.filter(model_name='User', action='delete').exists())

    def test_role_in_use_cannot_be_deleted(self):
        user = TestDataFactory.create_user(permissions=['view_dashboard'])
        response = self.client.delete(f'/api/v1/roles/{user.role_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Role.objects.filter(pk=user.role_id).exists())

    def test_create_role_with_permission_codes(self):
        Permission.objects.create(code='manage_content')
        response = self.client.post('/api/v1/roles/', {'name': 'Editor', 'permissions': ['manage_content']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['permissions'], ['manage_content'])

    def test_user_management_requires_permission(self):
        staff = TestDataFactory.create_user(permissions=['manage_rentals'])
        client = AuthenticatedAPIClient().authenticate_user(staff)
        response = client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_seed_roles(self):
        """The seed command creates every permission and the default roles, idempotently"""
        call_command('seed_roles', stdout=StringIO())
        call_command('seed_roles', stdout=StringIO())
        self.assertEqual(Permission.objects.count(), len(PERMISSION_CATALOGUE))
        self.assertEqual(Role.objects.get(name='Admin').permissions.count(), len(PERMISSION_CATALOGUE))
        self.assertIn('manage_rentals', Role.objects.get(name='Staff').permissions.values_list('code', flat=True))


class ShopSettingsTests(TestCase):
    """Test the shop settings singleton"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_public_read(self):
        response = APIClient().get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['appointment_slots_per_day'], 8)
        self.assertNotIn('updated_at', response.data)

    def test_update(self):
        response = self.client.put('/api/v1/settings/', {'appointment_slots_per_day': 4, 'gcash_name': 'Kasal Shop'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(ShopSettings.load().appointment_slots_per_day, 4)
        self.assertEqual(get_cached_shop_settings().appointment_slots_per_day, 4)

    def test_invalid_slots(self):
        for value in (-1, 'many', '2.5'):
            response = self.client.put('/api/v1/settings/', {'appointment_slots_per_day': value}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_requires_permission(self):
        self.assertEqual(APIClient().put('/api/v1/settings/', {'gcash_name': 'x'}, format='json').status_code,
                         status.HTTP_401_UNAUTHORIZED)
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(permissions=['manage_rentals']))
        self.assertEqual(client.put('/api/v1/settings/', {'gcash_name': 'x'}, format='json').status_code,
                         status.HTTP_403_FORBIDDEN)

    def test_singleton(self):
        ShopSettings(gcash_name='A').save()
        ShopSettings(gcash_name='B').save()
        self.assertEqual(ShopSettings.objects.count(), 1)
        self.assertEqual(ShopSettings.load().gcash_name, 'B')


class AuditLogTests(TestCase):
    """Test audit log creation and listing"""

    def setUp(self):
        self.admin = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_missing_fields_skipped(self):
        self.assertIsNone(create_audit_log(action='create', model_name='Rental'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_filter_by_reference(self):
        create_audit_log(user=self.admin, action='create', model_name='Rental', object_id='KSL_AAAA1111',
                         object_reference='KSL_AAAA1111')
        create_audit_log(user=self.admin, action='cancel', model_name='Rental', object_id='KSL_BBBB2222',
                         object_reference='KSL_BBBB2222')
        response = self.client.get('/api/v1/audit-logs/?reference=AAAA')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['username'], self.admin.username)

        response = self.client.get('/api/v1/audit-logs/?action=cancel')
        self.assertEqual(response.data['results'][0]['object_id'], 'KSL_BBBB2222')


class SanitizerTests(TestCase):
    """Test title-casing of incoming payloads"""

    def test_title_case(self):
        self.assertEqual(title_case('  maria   CLARA '), 'Maria Clara')

    def test_nested_payload(self):
        data = {
            'customer_info': {'name': 'juan dela cruz', 'email': 'Juan@Example.com', 'phone_number': '0917'},
            'single_items': [{'variation_id': 3, 'notes': 'keep as typed'}],
            'custom_items': [{'reference': 'CUST-AB12CD34', 'name': 'barong', 'measurements': {'chest': '40 in'}}],
        }
        cleaned = sanitize_payload(data)
        self.assertEqual(cleaned['customer_info']['name'], 'Juan Dela Cruz')
        self.assertEqual(cleaned['customer_info']['email'], 'Juan@Example.com')
        self.assertEqual(cleaned['single_items'][0], {'variation_id': 3, 'notes': 'keep as typed'})
        self.assertEqual(cleaned['custom_items'][0]['reference'], 'CUST-AB12CD34')
        self.assertEqual(cleaned['custom_items'][0]['name'], 'Barong')
        self.assertEqual(cleaned['custom_items'][0]['measurements'], {'chest': '40 in'})

    @override_settings(KASAL_RENTAL={'TITLE_CASE_EXCLUDED_KEYS': []})
    def test_id_keys_always_skipped(self):
        self.assertEqual(sanitize_payload({'package_ids': ['abc'], 'rental_id': 'ksl_1'}),
                         {'package_ids': ['abc'], 'rental_id': 'ksl_1'})


class ParseDateTests(TestCase):
    def test_iso_datetime(self):
        self.assertEqual(str(parse_date('2026-05-01T08:00:00Z')), '2026-05-01')

    def test_missing_and_invalid(self):
        with self.assertRaises(ValueError):
            parse_date(None, 'new_date')
        with self.assertRaises(ValueError):
            parse_date('01/05/2026')
