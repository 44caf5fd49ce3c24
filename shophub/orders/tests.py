"""
Test suite for Orders module
Tests: totals, shipping threshold, order numbers, stock decrement, guest and
shopper checkout, order history scoping and admin status updates
"""
import re
import uuid
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from shophub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shophub.core.models import AuditLog
from shophub.catalog.models import Product
from shophub.orders.models import Order, OrderItem
from shophub.orders.services import (
    calculate_totals, calculate_shipping, generate_order_number, to_base36,
    create_order, update_order_status, OrderError,
)


def checkout_payload(lines, **overrides):
    data = {
        'customer_email': 'jane@test.com',
        'customer_name': 'Jane Doe',
        'customer_phone': '5550100',
        'shipping_address': '1 Main Street',
        'shipping_city': 'Springfield',
        'shipping_zip': '12345',
        'shipping_country': 'US',
        'items': [{'product_id': str(product.id), 'quantity': quantity} for product, quantity in lines],
    }
    data.update(overrides)
    return data


class OrderTotalsTests(TestCase):
    """Test subtotal, shipping and total calculation"""

    def test_shipping_charged_below_threshold(self):
        """Test flat shipping fee when subtotal is under 100"""
        subtotal, shipping, total = calculate_totals([(Decimal('99.99'), 1)])
        self.assertEqual(subtotal, Decimal('99.99'))
        self.assertEqual(shipping, Decimal('10.00'))
        self.assertEqual(total, Decimal('109.99'))

    def test_free_shipping_at_threshold(self):
        """Test shipping is free when subtotal is exactly 100"""
        subtotal, shipping, total = calculate_totals([(Decimal('50.00'), 2)])
        self.assertEqual(subtotal, Decimal('100.00'))
        self.assertEqual(shipping, Decimal('0.00'))
        self.assertEqual(total, Decimal('100.00'))

    def test_free_shipping_above_threshold(self):
        """Test shipping is free when subtotal exceeds 100"""
        subtotal, shipping, total = calculate_totals([(Decimal('149.99'), 1), (Decimal('24.99'), 2)])
        self.assertEqual(subtotal, Decimal('199.97'))
        self.assertEqual(shipping, Decimal('0.00'))
        self.assertEqual(total, Decimal('199.97'))

    def test_no_tax_applied(self):
        """Test total is subtotal plus shipping only"""
        subtotal, shipping, total = calculate_totals([(Decimal('10.00'), 3)])
        self.assertEqual(total, subtotal + shipping)
        self.assertEqual(total, Decimal('40.00'))

    def test_calculate_shipping_uses_settings(self):
        """Test threshold and fee come from settings"""
        with self.settings(FREE_SHIPPING_THRESHOLD=Decimal('50.00'), FLAT_SHIPPING_COST=Decimal('5.00')):
            self.assertEqual(calculate_shipping(Decimal('49.99')), Decimal('5.00'))
            self.assertEqual(calculate_shipping(Decimal('50.00')), Decimal('0.00'))


class OrderNumberTests(TestCase):
    """Test order number generation"""

    def test_to_base36(self):
        """Test base36 conversion"""
        self.assertEqual(to_base36(0), '0')
        self.assertEqual(to_base36(35), 'Z')
        self.assertEqual(to_base36(36), '10')

    def test_order_number_format(self):
        """Test ORD-<base36 time>-<4 hex chars> format"""
        order_number = generate_order_number()
        self.assertRegex(order_number, r'^ORD-[0-9A-Z]+-[0-9A-F]{4}$')

    def test_order_numbers_unique(self):
        """Test consecutive order numbers differ"""
        numbers = {generate_order_number() for _ in range(5)}
        self.assertEqual(len(numbers), 5)


class CreateOrderServiceTests(TestCase):
    """Test create_order service"""

    def setUp(self):
        self.category = TestDataFactory.create_category()
        self.headphones = TestDataFactory.create_product(
            name='Headphones', category=self.category, price=Decimal('149.99'), stock=50
        )
        self.socks = TestDataFactory.create_product(
            name='Socks', category=self.category, price=Decimal('5.50'), stock=3
        )

    def _data(self, items, **extra):
        data = {
            'customer_email': 'jane@test.com',
            'customer_name': 'Jane Doe',
            'customer_phone': '5550100',
            'shipping_address': '1 Main Street',
            'shipping_city': 'Springfield',
            'shipping_zip': '12345',
            'shipping_country': 'US',
            'items': items,
        }
        data.update(extra)
        return data

    def test_create_order_snapshots_lines(self):
        """Test items store product name and current price"""
        order = create_order(self._data([{'product_id': self.socks.id, 'quantity': 2}]))
        item = order.items.get()
        self.assertEqual(item.product_name, 'Socks')
        self.assertEqual(item.price, Decimal('5.50'))
        self.assertEqual(item.quantity, 2)
        self.assertEqual(order.subtotal, Decimal('11.00'))
        self.assertEqual(order.shipping_cost, Decimal('10.00'))
        self.assertEqual(order.total, Decimal('21.00'))
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)

    def test_create_order_decrements_stock(self):
        """Test stock is reduced by ordered quantity"""
        create_order(self._data([
            {'product_id': self.headphones.id, 'quantity': 2},
            {'product_id': self.socks.id, 'quantity': 1},
        ]))
        self.headphones.refresh_from_db()
        self.socks.refresh_from_db()
        self.assertEqual(self.headphones.stock, 48)
        self.assertEqual(self.socks.stock, 2)

    def test_stock_can_go_negative(self):
        """Test ordering more than available stock is not rejected"""
        create_order(self._data([{'product_id': self.socks.id, 'quantity': 5}]))
        self.socks.refresh_from_db()
        self.assertEqual(self.socks.stock, -2)

    def test_duplicate_lines_accepted(self):
        """Test the same product on two lines decrements stock twice"""
        order = create_order(self._data([
            {'product_id': self.socks.id, 'quantity': 1},
            {'product_id': self.socks.id, 'quantity': 1},
        ]))
        self.assertEqual(order.items.count(), 2)
        self.socks.refresh_from_db()
        self.assertEqual(self.socks.stock, 1)

    def test_missing_product_rejected(self):
        """Test unknown product raises and writes nothing"""
        with self.assertRaises(OrderError) as ctx:
            create_order(self._data([
                {'product_id': self.socks.id, 'quantity': 1},
                {'product_id': uuid.uuid4(), 'quantity': 1},
            ]))
        self.assertEqual(ctx.exception.message, 'One or more products not found')
        self.assertEqual(Order.objects.count(), 0)
        self.socks.refresh_from_db()
        self.assertEqual(self.socks.stock, 3)

    def test_total_over_column_limit_rejected(self):
        """Test a total that does not fit the amount columns raises and writes nothing"""
        with self.assertRaises(OrderError) as ctx:
            create_order(self._data([{'product_id': self.headphones.id, 'quantity': 10 ** 9}]))
        self.assertEqual(ctx.exception.message, 'Order total exceeds the maximum allowed amount')
        self.assertEqual(Order.objects.count(), 0)
        self.headphones.refresh_from_db()
        self.assertEqual(self.headphones.stock, 50)

    def test_payment_id_marks_paid(self):
        """Test a supplied payment id marks the order as paid"""
        order = create_order(self._data(
            [{'product_id': self.socks.id, 'quantity': 1}], stripe_payment_id='pi_123'
        ))
        self.assertEqual(order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(order.stripe_payment_id, 'pi_123')

    def test_blank_payment_id_stays_pending(self):
        """Test an empty payment id leaves payment pending"""
        order = create_order(self._data(
            [{'product_id': self.socks.id, 'quantity': 1}], stripe_payment_id=''
        ))
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)
        self.assertIsNone(order.stripe_payment_id)

    def test_update_order_status(self):
        """Test status update returns previous value"""
        order = create_order(self._data([{'product_id': self.socks.id, 'quantity': 1}]))
        previous = update_order_status(order, Order.STATUS_SHIPPED)
        self.assertEqual(previous, Order.STATUS_PENDING)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_SHIPPED)

    def test_update_order_status_invalid(self):
        """Test unknown status is rejected"""
        order = create_order(self._data([{'product_id': self.socks.id, 'quantity': 1}]))
        with self.assertRaises(OrderError):
            update_order_status(order, 'LOST')


class OrderAPITests(TestCase):
    """Test storefront order endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(price=Decimal('40.00'), stock=10)

    def test_guest_checkout(self):
        """Test creating an order without authentication"""
        response = self.client.post('/api/orders/', checkout_payload([(self.product, 2)]), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['user'])
        self.assertEqual(Decimal(response.data['subtotal']), Decimal('80.00'))
        self.assertEqual(Decimal(response.data['shipping_cost']), Decimal('10.00'))
        self.assertEqual(Decimal(response.data['total']), Decimal('90.00'))
        self.assertTrue(re.match(r'^ORD-[0-9A-Z]+-[0-9A-F]{4}$', response.data['order_number']))
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['line_total'], '80.00')

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 8)
        self.assertTrue(AuditLog.objects.filter(action='order_create').exists())

    def test_authenticated_checkout_links_user(self):
        """Test order is attached to the signed-in shopper"""
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/orders/', checkout_payload([(self.product, 3)]), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user'], self.user.id)
        self.assertEqual(Decimal(response.data['shipping_cost']), Decimal('0.00'))
        self.assertEqual(Decimal(response.data['total']), Decimal('120.00'))

    def test_invalid_token_treated_as_guest(self):
        """Test a bad bearer token does not block checkout"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.post('/api/orders/', checkout_payload([(self.product, 1)]), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['user'])

    def test_missing_product(self):
        """Test unknown product returns 400"""
        data = checkout_payload([(self.product, 1)])
        data['items'].append({'product_id': str(uuid.uuid4()), 'quantity': 1})
        response = self.client.post('/api/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'One or more products not found')
        self.assertEqual(Order.objects.count(), 0)

    def test_validation_errors(self):
        """Test missing fields, bad email, empty cart and zero quantity"""
        data = checkout_payload([(self.product, 1)], customer_email='not-an-email')
        del data['shipping_city']
        response = self.client.post('/api/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        self.assertIn('customer_email', response.data['details'])
        self.assertIn('shipping_city', response.data['details'])

        response = self.client.post('/api/orders/', checkout_payload([]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data['details'])

        response = self.client.post('/api/orders/', checkout_payload([(self.product, 0)]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_oversized_quantity_rejected(self):
        """Test a huge quantity is refused and the admin views stay readable"""
        response = self.client.post('/api/orders/', checkout_payload([(self.product, 10 ** 9)]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        self.assertIn('items', response.data['details'])
        self.assertEqual(Order.objects.count(), 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

        self.client.authenticate_admin(TestDataFactory.create_admin())
        self.assertEqual(self.client.get('/api/admin/orders/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get('/api/admin/stats/').status_code, status.HTTP_200_OK)

    def test_total_over_limit_returns_400(self):
        """Test allowed quantities whose total overflows return a JSON error"""
        pricey = TestDataFactory.create_product(price=Decimal('99999.99'), stock=10)
        response = self.client.post('/api/orders/', checkout_payload([(pricey, 9999)]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Order total exceeds the maximum allowed amount')
        self.assertEqual(Order.objects.count(), 0)

    def test_order_detail(self):
        """Test fetching an order by id"""
        order = TestDataFactory.create_order(lines=[(self.product, 1)])
        response = self.client.get(f'/api/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_number'], order.order_number)
        self.assertEqual(response.data['items'][0]['product']['slug'], self.product.slug)

    def test_order_detail_not_found(self):
        """Test unknown order id returns 404"""
        response = self.client.get(f'/api/orders/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Order not found')

    def test_deleted_product_keeps_snapshot(self):
        """Test order items survive product deletion"""
        order = TestDataFactory.create_order(lines=[(self.product, 1)])
        name = self.product.name
        Product.objects.filter(pk=self.product.pk).delete()
        item = OrderItem.objects.get(order=order)
        self.assertIsNone(item.product)
        self.assertEqual(item.product_name, name)


class UserOrderAPITests(TestCase):
    """Test shopper order history"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product()
        self.own_orders = [TestDataFactory.create_order(user=self.user, lines=[(self.product, 1)]) for _ in range(3)]
        self.foreign_order = TestDataFactory.create_order(user=self.other, lines=[(self.product, 1)])

    def test_requires_authentication(self):
        """Test anonymous access is rejected"""
        response = self.client.get('/api/user/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_lists_only_own_orders(self):
        """Test order history is scoped to the caller"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/user/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = {o['id'] for o in response.data['orders']}
        self.assertEqual(ids, {str(o.id) for o in self.own_orders})
        self.assertEqual(response.data['pagination']['total'], 3)
        self.assertEqual(response.data['pagination']['limit'], 10)

    def test_pagination(self):
        """Test page and limit parameters"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/user/orders/?page=2&limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['orders']), 1)
        self.assertEqual(response.data['pagination']['total_pages'], 2)

    def test_foreign_order_hidden(self):
        """Test another shopper's order returns 404"""
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/user/orders/{self.foreign_order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.get(f'/api/user/orders/{self.own_orders[0].id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class AdminOrderAPITests(TestCase):
    """Test back-office order management"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product()
        self.pending = TestDataFactory.create_order(lines=[(self.product, 1)], email='alice@test.com')
        self.paid = TestDataFactory.create_order(
            lines=[(self.product, 2)], payment_status=Order.PAYMENT_PAID, email='bob@test.com'
        )

    def test_non_admin_forbidden(self):
        """Test shoppers cannot list all orders"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_orders(self):
        """Test admin lists every order"""
        self.client.authenticate_admin(self.admin)
        response = self.client.get('/api/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 2)

    def test_filter_orders(self):
        """Test payment status and search filters"""
        self.client.authenticate_admin(self.admin)
        response = self.client.get('/api/admin/orders/?payment_status=PAID')
        self.assertEqual([o['id'] for o in response.data['orders']], [str(self.paid.id)])

        response = self.client.get('/api/admin/orders/?search=alice')
        self.assertEqual([o['id'] for o in response.data['orders']], [str(self.pending.id)])

    def test_invalid_filter(self):
        """Test unknown status filter value returns 400"""
        self.client.authenticate_admin(self.admin)
        response = self.client.get('/api/admin/orders/?status=LOST')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_status(self):
        """Test admin updates fulfilment status"""
        self.client.authenticate_admin(self.admin)
        response = self.client.put(
            f'/api/admin/orders/{self.pending.id}/status/', {'status': 'SHIPPED'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'SHIPPED')
        log = AuditLog.objects.get(action='order_status')
        self.assertEqual(log.changes['status'], {'from': 'PENDING', 'to': 'SHIPPED'})

    def test_update_status_invalid(self):
        """Test invalid status value returns 400"""
        self.client.authenticate_admin(self.admin)
        response = self.client.put(
            f'/api/admin/orders/{self.pending.id}/status/', {'status': 'LOST'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')

    def test_update_status_not_found(self):
        """Test unknown order returns 404"""
        self.client.authenticate_admin(self.admin)
        response = self.client.put(
            f'/api/admin/orders/{uuid.uuid4()}/status/', {'status': 'SHIPPED'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class OrderCacheInvalidationTests(TestCase):
    """Test cached catalog and dashboard data refresh after orders change"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.product = TestDataFactory.create_product(price=Decimal('20.00'), stock=5)

    def _listed_stock(self):
        response = self.client.get('/api/products/')
        return {p['id']: p['stock'] for p in response.data['products']}[str(self.product.id)]

    def _stats(self):
        self.client.authenticate_admin(self.admin)
        response = self.client.get('/api/admin/stats/')
        self.client.logout()
        return response.data

    def test_checkout_refreshes_listing_and_stats(self):
        """Test committed orders clear the cached listing and dashboard"""
        self.assertEqual(self._listed_stock(), 5)
        self.assertEqual(self._stats()['orders']['total'], 0)

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            response = self.client.post('/api/orders/', checkout_payload([(self.product, 2)]), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(callbacks), 2)

        self.assertEqual(self._listed_stock(), 3)
        stats = self._stats()
        self.assertEqual(stats['orders']['total'], 1)
        self.assertEqual(stats['orders']['pending'], 1)

    def test_status_update_refreshes_stats(self):
        """Test admin status changes clear the cached dashboard"""
        order = TestDataFactory.create_order(lines=[(self.product, 1)])
        self.assertEqual(self._stats()['orders']['pending'], 1)

        update_order_status(order, Order.STATUS_SHIPPED)
        self.assertEqual(self._stats()['orders']['pending'], 0)
