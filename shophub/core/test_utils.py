"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils.text import slugify
from rest_framework.test import APIClient
from shophub.core.authentication import issue_tokens, TOKEN_TYPE_USER, TOKEN_TYPE_ADMIN
from shophub.catalog.models import Category, Product, ProductImage
from shophub.orders.models import Order, OrderItem
from shophub.orders.services import generate_order_number, calculate_totals
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, name=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test shopper"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        if not name:
            name = f'User {TestDataFactory.random_string(6)}'
        return User.objects.create_user(
            email=email,
            password=password,
            name=name,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_admin(email=None, name=None, password='testpass123'):
        """Create a test back-office user"""
        if not email:
            email = f'admin_{TestDataFactory.random_string(6).lower()}@test.com'
        return TestDataFactory.create_user(
            email=email,
            name=name or 'Test Admin',
            password=password,
            is_staff=True
        )

    @staticmethod
    def create_category(name=None, slug=None, description=None):
        """Create a test category"""
        if not name:
            name = f'Category {TestDataFactory.random_string(6)}'
        return Category.objects.create(
            name=name,
            slug=slug or slugify(name),
            description=description or f'Test category {name}'
        )

    @staticmethod
    def create_product(name=None, slug=None, category=None, price=None, stock=10,
                       status=Product.STATUS_ACTIVE, compare_price=None, with_image=True):
        """Create a test product with a cover image"""
        if not name:
            name = f'Product {TestDataFactory.random_string(6)}'
        if not category:
            category = TestDataFactory.create_category()
        if price is None:
            price = Decimal('25.00')
        product = Product.objects.create(
            name=name,
            slug=slug or slugify(name),
            description=f'Test product {name}',
            price=price,
            compare_price=compare_price,
            sku=f'SKU-{TestDataFactory.random_string(8).upper()}',
            stock=stock,
            status=status,
            category=category
        )
        if with_image:
            ProductImage.objects.create(
                product=product,
                url=f'https://images.test/{product.slug}.jpg',
                position=0
            )
        return product

    @staticmethod
    def create_order(user=None, lines=None, order_status=Order.STATUS_PENDING,
                     payment_status=Order.PAYMENT_PENDING, email=None):
        """
        Create a test order directly, without touching stock
        lines: list of (product, quantity) tuples
        """
        if lines is None:
            lines = [(TestDataFactory.create_product(), 1)]
        subtotal, shipping_cost, total = calculate_totals(
            (product.price, quantity) for product, quantity in lines
        )
        order = Order.objects.create(
            order_number=generate_order_number(),
            customer_email=email or (user.email if user else 'guest@test.com'),
            customer_name=user.name if user else 'Guest Shopper',
            customer_phone='5550100',
            shipping_address='1 Test Street',
            shipping_city='Testville',
            shipping_zip='12345',
            shipping_country='US',
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            total=total,
            status=order_status,
            payment_status=payment_status,
            user=user
        )
        for product, quantity in lines:
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                quantity=quantity,
                price=product.price
            )
        return order


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a shopper token"""
        tokens = issue_tokens(user, TOKEN_TYPE_USER)
        self.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        return self

    def authenticate_admin(self, user):
        """Authenticate the client with an admin token"""
        tokens = issue_tokens(user, TOKEN_TYPE_ADMIN)
        self.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
