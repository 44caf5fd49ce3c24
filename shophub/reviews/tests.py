"""
Test suite for Reviews module
Tests: listing with stats, creation rules, duplicate reviews and owner-only edits
"""
import uuid
from django.test import TestCase
from rest_framework import status
from shophub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shophub.core.models import AuditLog
from shophub.reviews.models import Review


class ReviewAPITests(TestCase):
    """Test product review endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(name='Alice Shopper')
        self.other = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product()
        self.url = f'/api/reviews/product/{self.product.id}/'

    def test_list_reviews_with_stats(self):
        """Test reviews are listed newest first with average rating"""
        Review.objects.create(user=self.user, product=self.product, rating=4, comment='Pretty good overall')
        Review.objects.create(user=self.other, product=self.product, rating=5, comment='Excellent, would buy again')

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats'], {'average_rating': 4.5, 'total_reviews': 2})
        self.assertEqual(response.data['pagination']['limit'], 10)
        self.assertEqual(response.data['reviews'][0]['rating'], 5)
        self.assertIn('name', response.data['reviews'][0]['user'])
        self.assertNotIn('email', response.data['reviews'][0]['user'])

    def test_list_reviews_empty(self):
        """Test a product without reviews has zero stats"""
        response = self.client.get(self.url)
        self.assertEqual(response.data['stats'], {'average_rating': 0.0, 'total_reviews': 0})
        self.assertEqual(response.data['reviews'], [])

    def test_create_requires_authentication(self):
        """Test anonymous review creation is rejected"""
        response = self.client.post(self.url, {'rating': 5, 'comment': 'Great product here'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_review(self):
        """Test creating a review"""
        self.client.authenticate_user(self.user)
        response = self.client.post(self.url, {'rating': 5, 'comment': 'Great product here'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['name'], 'Alice Shopper')
        self.assertTrue(AuditLog.objects.filter(action='review_create').exists())

    def test_create_review_validation(self):
        """Test rating range and comment length"""
        self.client.authenticate_user(self.user)
        response = self.client.post(self.url, {'rating': 6, 'comment': 'Great product here'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rating', response.data['details'])

        response = self.client.post(self.url, {'rating': 3, 'comment': 'Too short'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('comment', response.data['details'])

    def test_create_review_unknown_product(self):
        """Test reviewing a missing product returns 404"""
        self.client.authenticate_user(self.user)
        response = self.client.post(
            f'/api/reviews/product/{uuid.uuid4()}/', {'rating': 5, 'comment': 'Great product here'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_duplicate_review(self):
        """Test a second review of the same product is rejected"""
        self.client.authenticate_user(self.user)
        self.client.post(self.url, {'rating': 5, 'comment': 'Great product here'}, format='json')
        response = self.client.post(self.url, {'rating': 1, 'comment': 'Changed my mind'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'You have already reviewed this product')

    def test_update_own_review(self):
        """Test the author can update their review"""
        review = Review.objects.create(user=self.user, product=self.product, rating=2, comment='Not great at all')
        self.client.authenticate_user(self.user)
        response = self.client.put(
            f'/api/reviews/{review.id}/', {'rating': 4, 'comment': 'Grew on me after a week'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        review.refresh_from_db()
        self.assertEqual(review.rating, 4)

    def test_update_foreign_review(self):
        """Test another user cannot edit or delete the review"""
        review = Review.objects.create(user=self.user, product=self.product, rating=2, comment='Not great at all')
        self.client.authenticate_user(self.other)
        response = self.client.put(
            f'/api/reviews/{review.id}/', {'rating': 5, 'comment': 'Hijacked review text'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Not authorized')

        response = self.client.delete(f'/api/reviews/{review.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Review.objects.filter(pk=review.pk).exists())

    def test_delete_review(self):
        """Test the author can delete their review"""
        review = Review.objects.create(user=self.user, product=self.product, rating=2, comment='Not great at all')
        self.client.authenticate_user(self.user)
        response = self.client.delete(f'/api/reviews/{review.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Review.objects.filter(pk=review.pk).exists())

    def test_review_not_found(self):
        """Test missing review returns 404"""
        self.client.authenticate_user(self.user)
        response = self.client.delete('/api/reviews/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Review not found')
