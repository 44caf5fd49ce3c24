"""
Test suite for Reports module
Tests: dashboard counters, paid revenue, recent orders and caching
"""
from datetime import timedelta
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from shophub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shophub.catalog.models import Product
from shophub.orders.models import Order


class DashboardStatsTests(TestCase):
    """Test GET /api/admin/stats/"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_admin(self.admin)

        self.category = TestDataFactory.create_category()
        self.product = TestDataFactory.create_product(category=self.category, price=Decimal('60.00'))
        TestDataFactory.create_product(category=self.category, status=Product.STATUS_DRAFT)

    def test_requires_admin(self):
        """Test shoppers cannot read dashboard stats"""
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/admin/stats/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_empty_store(self):
        """Test counters with no orders"""
        response = self.client.get('/api/admin/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['products'], {'total': 2, 'active': 1})
        self.assertEqual(response.data['categories'], {'total': 1})
        self.assertEqual(response.data['orders']['total'], 0)
        self.assertEqual(response.data['revenue'], {'total': 0.0, 'this_month': 0.0})
        self.assertEqual(response.data['recent_orders'], [])

    def test_revenue_counts_paid_orders_only(self):
        """Test revenue sums totals of PAID orders"""
        TestDataFactory.create_order(lines=[(self.product, 2)], payment_status=Order.PAYMENT_PAID)
        TestDataFactory.create_order(lines=[(self.product, 1)], payment_status=Order.PAYMENT_PAID)
        TestDataFactory.create_order(lines=[(self.product, 1)], payment_status=Order.PAYMENT_FAILED)

        response = self.client.get('/api/admin/stats/')
        # 120.00 (free shipping) + 70.00 (60 + 10 shipping)
        self.assertEqual(response.data['revenue']['total'], 190.0)
        self.assertEqual(response.data['revenue']['this_month'], 190.0)
        self.assertEqual(response.data['orders']['total'], 3)
        self.assertEqual(response.data['orders']['today'], 3)
        self.assertEqual(response.data['orders']['pending'], 3)

    def test_old_orders_excluded_from_period_counters(self):
        """Test orders from previous months count only in totals"""
        old = TestDataFactory.create_order(lines=[(self.product, 2)], payment_status=Order.PAYMENT_PAID)
        Order.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=62))

        response = self.client.get('/api/admin/stats/')
        self.assertEqual(response.data['orders']['total'], 1)
        self.assertEqual(response.data['orders']['this_month'], 0)
        self.assertEqual(response.data['orders']['today'], 0)
        self.assertEqual(response.data['revenue']['total'], 120.0)
        self.assertEqual(response.data['revenue']['this_month'], 0.0)

    def test_recent_orders_limited(self):
        """Test only the five newest orders are returned"""
        orders = [TestDataFactory.create_order(lines=[(self.product, 1)]) for _ in range(7)]
        response = self.client.get('/api/admin/stats/')
        self.assertEqual(len(response.data['recent_orders']), 5)
        self.assertEqual(response.data['recent_orders'][0]['id'], str(orders[-1].id))

    def test_stats_cached(self):
        """Test repeated requests are served from cache"""
        self.client.get('/api/admin/stats/')
        TestDataFactory.create_order(lines=[(self.product, 1)])
        response = self.client.get('/api/admin/stats/')
        self.assertEqual(response.data['orders']['total'], 0)

        cache.clear()
        response = self.client.get('/api/admin/stats/')
        self.assertEqual(response.data['orders']['total'], 1)

    def test_cache_control_header(self):
        """Test the header is sent whether or not the stats come from cache"""
        first = self.client.get('/api/admin/stats/')
        second = self.client.get('/api/admin/stats/')
        self.assertEqual(first['Cache-Control'], 'private, max-age=60')
        self.assertEqual(second['Cache-Control'], 'private, max-age=60')
