"""
Test suite for content module
Tests: Home page sections, Static pages
"""
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from kasal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kasal.content.models import HomePageContent, Page


class HomePageContentTests(TestCase):
    """Test the home page singleton"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_defaults_on_first_read(self):
        response = APIClient().get('/api/v1/content/home/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['hero']['title'], 'Find your perfect outfit')
        self.assertEqual(response.data['features'], [])
        self.assertEqual(HomePageContent.objects.count(), 1)

    def test_partial_update(self):
        features = [{'icon': 'sparkle', 'title': 'Tailored fit', 'description': 'Made to measure'}]
        response = self.client.put('/api/v1/content/home/', {'features': features}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        content = HomePageContent.load()
        self.assertEqual(content.features, features)
        self.assertEqual(content.hero['title'], 'Find your perfect outfit')

    def test_invalid_sections(self):
        response = self.client.put('/api/v1/content/home/', {'features': [{'title': 'No icon'}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.put('/api/v1/content/home/', {'services': [{'title': 'Rent', 'text': 'x'}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.put('/api/v1/content/home/', {'hero': ['not', 'an', 'object']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_requires_permission(self):
        response = APIClient().put('/api/v1/content/home/', {'features': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(permissions=['manage_rentals']))
        response = client.put('/api/v1/content/home/', {'features': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PageTests(TestCase):
    """Test static storefront pages"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_fetch_by_slug(self):
        data = {'slug': 'about', 'title': 'About Us', 'content': {'body': 'Family-run since 1998'}}
        response = self.client.post('/api/v1/content/pages/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = APIClient().get('/api/v1/content/pages/about/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['content']['body'], 'Family-run since 1998')

    def test_duplicate_slug(self):
        Page.objects.create(slug='faq', title='FAQ')
        response = self.client.post('/api/v1/content/pages/', {'slug': 'faq', 'title': 'Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        Page.objects.create(slug='terms', title='Terms')
        response = self.client.patch('/api/v1/content/pages/terms/', {'title': 'Rental Terms'}, format='json')
        self.assertEqual(response.data['title'], 'Rental Terms')

        response = self.client.delete('/api/v1/content/pages/terms/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(APIClient().get('/api/v1/content/pages/terms/').status_code, status.HTTP_404_NOT_FOUND)
