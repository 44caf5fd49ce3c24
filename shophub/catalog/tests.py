"""
Test suite for Catalog module
Tests: product listing filters, sorting, pagination, search, detail,
categories with counts, cache invalidation and the seed command
"""
from decimal import Decimal
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from shophub.core.test_utils import TestDataFactory
from shophub.catalog.models import Category, Product, ProductImage


class ProductModelTests(TestCase):
    """Test Product model helpers"""

    def test_is_discounted(self):
        """Test compare price marks a product as discounted"""
        product = TestDataFactory.create_product(price=Decimal('10.00'), compare_price=Decimal('15.00'))
        self.assertTrue(product.is_discounted)
        product.compare_price = None
        self.assertFalse(product.is_discounted)

    def test_images_ordered_by_position(self):
        """Test gallery ordering"""
        product = TestDataFactory.create_product(with_image=False)
        ProductImage.objects.create(product=product, url='https://images.test/b.jpg', position=1)
        ProductImage.objects.create(product=product, url='https://images.test/a.jpg', position=0)
        self.assertEqual([i.position for i in product.images.all()], [0, 1])


class ProductAPITests(TestCase):
    """Test public product endpoints"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.audio = TestDataFactory.create_category(name='Audio', slug='audio')
        self.books = TestDataFactory.create_category(name='Books', slug='books')
        self.headphones = TestDataFactory.create_product(
            name='Wireless Headphones', category=self.audio, price=Decimal('149.99'),
            compare_price=Decimal('199.99')
        )
        self.speaker = TestDataFactory.create_product(
            name='Bluetooth Speaker', category=self.audio, price=Decimal('79.99')
        )
        self.novel = TestDataFactory.create_product(
            name='Mystery Novel', category=self.books, price=Decimal('12.50')
        )
        self.draft = TestDataFactory.create_product(
            name='Draft Gadget', category=self.audio, status=Product.STATUS_DRAFT
        )

    def _slugs(self, response):
        return [p['slug'] for p in response.data['products']]

    def test_list_active_only(self):
        """Test draft products are hidden"""
        response = self.client.get('/api/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn(self.draft.slug, self._slugs(response))
        self.assertEqual(response.data['pagination']['total'], 3)
        self.assertEqual(response.data['pagination']['limit'], 12)

    def test_filter_by_category(self):
        """Test category slug filter"""
        response = self.client.get('/api/products/?category=books')
        self.assertEqual(self._slugs(response), [self.novel.slug])

    def test_filter_by_price_range(self):
        """Test min and max price filters"""
        response = self.client.get('/api/products/?min_price=50&max_price=100')
        self.assertEqual(self._slugs(response), [self.speaker.slug])

    def test_filter_discount(self):
        """Test discount filter keeps products with a compare price"""
        response = self.client.get('/api/products/?discount=true')
        self.assertEqual(self._slugs(response), [self.headphones.slug])

    def test_filter_search(self):
        """Test case-insensitive search"""
        response = self.client.get('/api/products/?search=BLUETOOTH')
        self.assertEqual(self._slugs(response), [self.speaker.slug])

    def test_invalid_filter(self):
        """Test non-numeric price returns 400"""
        response = self.client.get('/api/products/?min_price=cheap')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sort_by_price(self):
        """Test sort and order parameters"""
        response = self.client.get('/api/products/?sort=price&order=asc')
        self.assertEqual(self._slugs(response), [self.novel.slug, self.speaker.slug, self.headphones.slug])
        response = self.client.get('/api/products/?sort=price&order=desc')
        self.assertEqual(self._slugs(response), [self.headphones.slug, self.speaker.slug, self.novel.slug])

    def test_unknown_sort_falls_back(self):
        """Test unknown sort field is ignored"""
        response = self.client.get('/api/products/?sort=stock')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_pagination(self):
        """Test limit and page parameters"""
        response = self.client.get('/api/products/?sort=price&order=asc&limit=2&page=2')
        self.assertEqual(self._slugs(response), [self.headphones.slug])
        self.assertEqual(response.data['pagination']['total_pages'], 2)

    def test_list_includes_cover_image_only(self):
        """Test list cards carry one image"""
        ProductImage.objects.create(product=self.speaker, url='https://images.test/extra.jpg', position=5)
        response = self.client.get('/api/products/?search=speaker')
        self.assertEqual(len(response.data['products'][0]['images']), 1)

    def test_list_cache_invalidated_on_write(self):
        """Test product changes are visible after the cached listing"""
        self.client.get('/api/products/')
        self.novel.status = Product.STATUS_DRAFT
        self.novel.save()
        response = self.client.get('/api/products/')
        self.assertNotIn(self.novel.slug, self._slugs(response))

    def test_search_endpoint(self):
        """Test quick search"""
        response = self.client.get('/api/products/search/?q=novel')
        self.assertEqual([p['slug'] for p in response.data['products']], [self.novel.slug])

    def test_search_empty_query(self):
        """Test empty query returns no products"""
        response = self.client.get('/api/products/search/?q=')
        self.assertEqual(response.data, {'products': []})

    def test_search_limit(self):
        """Test search limit"""
        response = self.client.get('/api/products/search/?q=e&limit=1')
        self.assertEqual(len(response.data['products']), 1)

    def test_product_detail(self):
        """Test product detail with category and gallery"""
        ProductImage.objects.create(product=self.headphones, url='https://images.test/side.jpg', position=1)
        response = self.client.get(f'/api/products/{self.headphones.slug}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['category']['slug'], 'audio')
        self.assertEqual(len(response.data['images']), 2)
        self.assertEqual(response.data['compare_price'], '199.99')

    def test_product_detail_not_found(self):
        """Test unknown slug returns 404"""
        response = self.client.get('/api/products/no-such-thing/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Product not found')


class CategoryAPITests(TestCase):
    """Test public category endpoints"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.toys = TestDataFactory.create_category(name='Toys', slug='toys')
        self.audio = TestDataFactory.create_category(name='Audio', slug='audio')
        TestDataFactory.create_product(category=self.audio)
        TestDataFactory.create_product(category=self.audio)

    def test_category_list(self):
        """Test categories ordered by name with product counts"""
        response = self.client.get('/api/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['slug'] for c in response.data], ['audio', 'toys'])
        self.assertEqual(response.data[0]['product_count'], 2)
        self.assertEqual(response.data[1]['product_count'], 0)

    def test_category_cache_invalidated(self):
        """Test new categories appear after the cached list"""
        self.client.get('/api/categories/')
        TestDataFactory.create_category(name='Books', slug='books')
        response = self.client.get('/api/categories/')
        self.assertEqual(len(response.data), 3)

    def test_category_products(self):
        """Test products of a category"""
        response = self.client.get('/api/categories/audio/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['category']['slug'], 'audio')
        self.assertEqual(len(response.data['products']), 2)

    def test_category_products_not_found(self):
        """Test unknown category returns 404"""
        response = self.client.get('/api/categories/missing/products/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Category not found')


class SeedStoreCommandTests(TestCase):
    """Test the seed_store management command"""

    def test_seed_is_idempotent(self):
        """Test seeding twice creates data once"""
        call_command('seed_store', stdout=StringIO())
        call_command('seed_store', stdout=StringIO())
        self.assertEqual(Category.objects.count(), 8)
        self.assertEqual(Product.objects.count(), 25)
        headphones = Product.objects.get(sku='WBH-001')
        self.assertEqual(headphones.price, Decimal('149.99'))
        self.assertEqual(headphones.images.count(), 2)

    def test_seed_creates_admin(self):
        """Test admin account can be used for back-office login"""
        call_command('seed_store', stdout=StringIO())
        response = APIClient().post('/api/admin/auth/login/', {
            'email': 'admin@shop-hub.com', 'password': 'admin123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
