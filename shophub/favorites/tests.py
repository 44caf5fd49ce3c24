"""
Test suite for Favorites module
"""
import uuid
from django.test import TestCase
from rest_framework import status
from shophub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shophub.favorites.models import Favorite


class FavoriteAPITests(TestCase):
    """Test wishlist endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product()
        self.client.authenticate_user(self.user)

    def test_requires_authentication(self):
        """Test anonymous access is rejected"""
        self.client.logout()
        response = self.client.get('/api/favorites/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_add_favorite(self):
        """Test adding a product returns 201"""
        response = self.client.post(f'/api/favorites/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data, {'success': True})
        self.assertTrue(Favorite.objects.filter(user=self.user, product=self.product).exists())

    def test_add_favorite_twice(self):
        """Test adding an existing favorite is a no-op"""
        self.client.post(f'/api/favorites/{self.product.id}/')
        response = self.client.post(f'/api/favorites/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Already in favorites')
        self.assertEqual(Favorite.objects.filter(user=self.user).count(), 1)

    def test_add_unknown_product(self):
        """Test adding a missing product returns 404"""
        response = self.client.post(f'/api/favorites/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Product not found')

    def test_remove_favorite_idempotent(self):
        """Test removal succeeds whether or not the favorite exists"""
        Favorite.objects.create(user=self.user, product=self.product)
        response = self.client.delete(f'/api/favorites/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Favorite.objects.filter(user=self.user).exists())

        response = self.client.delete(f'/api/favorites/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_check_favorite(self):
        """Test is_favorite flag"""
        response = self.client.get(f'/api/favorites/check/{self.product.id}/')
        self.assertEqual(response.data, {'is_favorite': False})
        Favorite.objects.create(user=self.user, product=self.product)
        response = self.client.get(f'/api/favorites/check/{self.product.id}/')
        self.assertEqual(response.data, {'is_favorite': True})

    def test_list_favorites(self):
        """Test favorites are listed newest first and scoped to the user"""
        second = TestDataFactory.create_product()
        Favorite.objects.create(user=self.user, product=self.product)
        Favorite.objects.create(user=self.user, product=second)
        Favorite.objects.create(user=TestDataFactory.create_user(), product=self.product)

        response = self.client.get('/api/favorites/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], [str(second.id), str(self.product.id)])
        self.assertEqual(len(response.data[0]['images']), 1)
