"""
Comprehensive test suite for catalog module
Tests: Items, Variations, Filters, Packages, Measurement references
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from kasal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kasal.catalog.models import Item, ItemVariation, Package, MotifAssignment, MeasurementRef


class ItemAPITests(TestCase):
    """Test item endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_item_with_variations(self):
        data = {
            'name': 'Ivory Ball Gown',
            'price': '4500.00',
            'category': 'Gown',
            'gender': 'Female',
            'variations': [
                {'color_name': 'Ivory', 'color_hex': '#FFFFF0', 'size': 'S', 'quantity': 2},
                {'color_name': 'Ivory', 'color_hex': '#FFFFF0', 'size': 'M', 'quantity': 3},
            ],
        }
        response = self.client.post('/api/v1/items/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_stock'], 5)
        self.assertEqual(response.data['variations'][0]['label'], 'Ivory, S')

    def test_duplicate_variation_rejected(self):
        data = {
            'name': 'Barong',
            'price': '2000.00',
            'category': 'Barong',
            'variations': [
                {'color_name': 'White', 'color_hex': '#FFF', 'size': 'M', 'quantity': 1},
                {'color_name': 'white ', 'color_hex': '#FFF', 'size': 'm', 'quantity': 1},
            ],
        }
        response = self.client.post('/api/v1/items/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Item.objects.exists())

    def test_update_variations_keeps_ids(self):
        """Variations are matched on colour and size so rental lines keep their references"""
        item = TestDataFactory.create_item(variations=[('Ivory', 'M', 5), ('Ivory', 'L', 5)])
        medium = item.variations.get(size='M')
        data = {'variations': [
            {'color_name': 'Ivory', 'color_hex': '#FFFFF0', 'size': 'M', 'quantity': 7},
            {'color_name': 'Blush', 'color_hex': '#FFC0CB', 'size': 'M', 'quantity': 1},
        ]}
        response = self.client.patch(f'/api/v1/items/{item.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        medium.refresh_from_db()
        self.assertEqual(medium.quantity, 7)
        self.assertFalse(item.variations.filter(size='L').exists())
        self.assertEqual(item.variations.count(), 2)

    def test_delete_item(self):
        item = TestDataFactory.create_item()
        response = self.client.delete(f'/api/v1/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ItemVariation.objects.exists())

    def test_public_read_staff_write(self):
        TestDataFactory.create_item()
        public = APIClient()
        self.assertEqual(public.get('/api/v1/items/').status_code, status.HTTP_200_OK)
        response = public.post('/api/v1/items/', {'name': 'X', 'price': '1.00', 'category': 'Gown'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_by_name_ignores_variation_suffix(self):
        item = TestDataFactory.create_item(name='Maria Clara Gown')
        response = APIClient().get('/api/v1/items/by-name/', {'name': 'maria clara gown, Ivory, M'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], item.id)

        response = APIClient().get('/api/v1/items/by-name/', {'name': 'Unknown'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_heart(self):
        item = TestDataFactory.create_item()
        response = APIClient().post(f'/api/v1/items/{item.id}/heart/')
        self.assertEqual(response.data['heart_count'], 1)
        self.assertEqual(APIClient().post('/api/v1/items/999999/heart/').status_code, status.HTTP_404_NOT_FOUND)


class ItemFilterTests(TestCase):
    """Test storefront filters"""

    def setUp(self):
        self.client = APIClient()
        TestDataFactory.create_item(name='Ivory Ball Gown', price=Decimal('4500.00'), category='Gown')
        barong = TestDataFactory.create_item(name='Pina Barong', price=Decimal('2000.00'), category='Barong',
                                             variations=[('White', 'M', 0)])
        barong.gender = 'Male'
        barong.save()

    def _names(self, params):
        response = self.client.get('/api/v1/items/', params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return [item['name'] for item in response.data]

    def test_search_all_words(self):
        self.assertEqual(self._names({'search': 'ivory gown'}), ['Ivory Ball Gown'])
        self.assertEqual(self._names({'search': 'ivory barong'}), [])

    def test_price_range(self):
        self.assertEqual(self._names({'max_price': '3000'}), ['Pina Barong'])

    def test_gender_includes_unisex(self):
        self.assertEqual(self._names({'gender': 'male'}), ['Ivory Ball Gown', 'Pina Barong'])
        self.assertEqual(self._names({'gender': 'unisex'}), ['Ivory Ball Gown'])

    def test_in_stock(self):
        self.assertEqual(self._names({'in_stock': 'true'}), ['Ivory Ball Gown'])
        self.assertEqual(self._names({'in_stock': 'false'}), ['Pina Barong'])


class PackageAPITests(TestCase):
    """Test package endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _payload(self, name='Grand Wedding'):
        return {
            'name': name,
            'price': '25000.00',
            'image_urls': ['https://img.test/grand.jpg'],
            'inclusions': [
                {'name': 'Bride', 'wearer_num': 1},
                {'name': 'Bridesmaid', 'wearer_num': 4},
            ],
            'color_motifs': [{
                'motif_name': 'Sage',
                'motif_hex': '#9CAF88',
                'assignments': [{'inclusion_index': 1, 'assigned_items': [{'item_id': 1, 'size': 'M'}]}],
            }],
        }

    def test_create_package(self):
        response = self.client.post('/api/v1/packages/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_wearers'], 5)
        assignment = MotifAssignment.objects.get()
        self.assertEqual(assignment.inclusion.name, 'Bridesmaid')

    def test_duplicate_name_conflict(self):
        TestDataFactory.create_package(name='Grand Wedding')
        response = self.client.post('/api/v1/packages/', self._payload(name='grand wedding'), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Package.objects.count(), 1)

    def test_motif_required(self):
        payload = self._payload()
        payload['color_motifs'] = []
        response = self.client.post('/api/v1/packages/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assignment_index_checked(self):
        payload = self._payload()
        payload['color_motifs'][0]['assignments'][0]['inclusion_index'] = 5
        response = self.client.post('/api/v1/packages/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rename_to_existing(self):
        TestDataFactory.create_package(name='Simple Civil')
        package = TestDataFactory.create_package(name='Garden Party')
        response = self.client.patch(f'/api/v1/packages/{package.id}/', {'name': 'SIMPLE CIVIL'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_check_name(self):
        package = TestDataFactory.create_package(name='Garden Party')
        response = APIClient().get('/api/v1/packages/check-name/', {'name': 'garden party'})
        self.assertTrue(response.data['is_taken'])
        response = APIClient().get('/api/v1/packages/check-name/', {'name': 'garden party', 'exclude_id': package.id})
        self.assertFalse(response.data['is_taken'])

    def test_list_sorted_by_price(self):
        TestDataFactory.create_package(name='Deluxe', price=Decimal('30000.00'))
        TestDataFactory.create_package(name='Basic', price=Decimal('8000.00'))
        response = APIClient().get('/api/v1/packages/')
        self.assertEqual([package['name'] for package in response.data], ['Basic', 'Deluxe'])


class MeasurementRefTests(TestCase):
    """Test measurement reference endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_filter(self):
        data = {
            'outfit_name': 'Barong Tagalog',
            'category': 'Barong',
            'measurements': [{'label': 'Chest', 'guide': 'Around the fullest part'}],
        }
        response = self.client.post('/api/v1/measurement-refs/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        MeasurementRef.objects.create(outfit_name='Terno', category='Gown')

        response = APIClient().get('/api/v1/measurement-refs/', {'category': 'barong'})
        self.assertEqual(len(response.data), 1)

    def test_measurement_needs_label(self):
        data = {'outfit_name': 'Terno', 'category': 'Gown', 'measurements': [{'guide': 'no label'}]}
        response = self.client.post('/api/v1/measurement-refs/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
