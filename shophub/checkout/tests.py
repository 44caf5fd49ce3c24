"""
Test suite for Checkout module
Tests: payment intent creation, webhook signature verification and
payment status reconciliation
"""
import hashlib
import hmac
import json
import time
import uuid
from decimal import Decimal
from unittest import mock
import stripe
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient
from shophub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shophub.core.models import AuditLog
from shophub.orders.models import Order
from shophub.checkout.payment_service import (
    apply_payment_event, create_payment_intent, to_minor_units, PaymentError,
)

WEBHOOK_SECRET = 'whsec_test_secret'


def payment_event(event_type, order_id=None, intent_id='pi_test_123'):
    metadata = {'orderId': str(order_id)} if order_id is not None else {}
    return {
        'id': 'evt_test',
        'type': event_type,
        'data': {'object': {'id': intent_id, 'object': 'payment_intent', 'metadata': metadata}},
    }


def sign_payload(payload, secret=WEBHOOK_SECRET):
    """Build a Stripe-Signature header for the payload"""
    timestamp = int(time.time())
    signed = f'{timestamp}.{payload}'.encode()
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f't={timestamp},v1={signature}'


class PaymentServiceTests(TestCase):
    """Test payment service functions"""

    def setUp(self):
        self.order = TestDataFactory.create_order()

    def test_to_minor_units(self):
        """Test dollars are converted to integer cents"""
        self.assertEqual(to_minor_units(Decimal('109.99')), 10999)
        self.assertEqual(to_minor_units(19.995), 2000)
        self.assertEqual(to_minor_units('10'), 1000)

    @mock.patch('stripe.PaymentIntent.create')
    def test_create_payment_intent(self, mock_create):
        """Test intent is created in cents with automatic payment methods"""
        mock_create.return_value = mock.Mock(id='pi_1', client_secret='secret_1')
        intent = create_payment_intent(Decimal('42.50'), {'orderId': 'abc'})
        self.assertEqual(intent.id, 'pi_1')
        mock_create.assert_called_once_with(
            amount=4250,
            currency='usd',
            automatic_payment_methods={'enabled': True},
            metadata={'orderId': 'abc'},
        )

    @mock.patch('stripe.PaymentIntent.create')
    def test_create_payment_intent_provider_error(self, mock_create):
        """Test Stripe errors become PaymentError with 500"""
        mock_create.side_effect = stripe.StripeError('card network down')
        with self.assertRaises(PaymentError) as ctx:
            create_payment_intent(Decimal('10.00'))
        self.assertEqual(ctx.exception.status_code, 500)

    def test_succeeded_marks_paid(self):
        """Test payment_intent.succeeded sets PAID and stores intent id"""
        order = apply_payment_event(payment_event('payment_intent.succeeded', self.order.id, 'pi_paid'))
        self.assertEqual(order.pk, self.order.pk)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.stripe_payment_id, 'pi_paid')
        log = AuditLog.objects.get(action='payment_status')
        self.assertEqual(log.changes['payment_status'], {'from': 'PENDING', 'to': 'PAID'})

    def test_failed_marks_failed(self):
        """Test payment_intent.payment_failed sets FAILED"""
        apply_payment_event(payment_event('payment_intent.payment_failed', self.order.id))
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_FAILED)
        self.assertIsNone(self.order.stripe_payment_id)

    def test_missing_order_id_ignored(self):
        """Test intents without orderId metadata are ignored"""
        self.assertIsNone(apply_payment_event(payment_event('payment_intent.succeeded')))
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_other_event_types_ignored(self):
        """Test unrelated event types do nothing"""
        self.assertIsNone(apply_payment_event(payment_event('charge.refunded', self.order.id)))
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_unknown_order_raises(self):
        """Test an orderId with no matching order raises"""
        with self.assertRaises(PaymentError):
            apply_payment_event(payment_event('payment_intent.succeeded', uuid.uuid4()))
        with self.assertRaises(PaymentError):
            apply_payment_event(payment_event('payment_intent.succeeded', 'not-a-uuid'))

    def test_replayed_event_reapplied(self):
        """Test the same event can be applied twice"""
        event = payment_event('payment_intent.succeeded', self.order.id)
        apply_payment_event(event)
        apply_payment_event(event)
        self.assertEqual(AuditLog.objects.filter(action='payment_status').count(), 2)


class CreateIntentAPITests(TestCase):
    """Test POST /api/checkout/create-intent/"""

    def setUp(self):
        self.client = APIClient()

    def test_invalid_amount(self):
        """Test missing, zero, negative and non-numeric amounts"""
        for data in [{}, {'amount': 0}, {'amount': -5}, {'amount': 'abc'}]:
            response = self.client.post('/api/checkout/create-intent/', data, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error'], 'Invalid amount')

    @mock.patch('stripe.PaymentIntent.create')
    def test_create_intent(self, mock_create):
        """Test client secret and intent id are returned"""
        mock_create.return_value = mock.Mock(id='pi_42', client_secret='pi_42_secret')
        response = self.client.post(
            '/api/checkout/create-intent/', {'amount': 109.99, 'order_id': 'ord-1'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'client_secret': 'pi_42_secret', 'payment_intent_id': 'pi_42'})
        kwargs = mock_create.call_args.kwargs
        self.assertEqual(kwargs['amount'], 10999)
        self.assertEqual(kwargs['metadata'], {'orderId': 'ord-1'})

    @mock.patch('stripe.PaymentIntent.create')
    def test_provider_failure(self, mock_create):
        """Test Stripe failure returns 500"""
        mock_create.side_effect = stripe.StripeError('boom')
        response = self.client.post('/api/checkout/create-intent/', {'amount': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to create payment intent')


@override_settings(STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET)
class WebhookAPITests(TestCase):
    """Test POST /api/checkout/webhook/"""

    def setUp(self):
        self.client = APIClient()
        self.order = TestDataFactory.create_order()

    def _post(self, payload, signature):
        return self.client.post(
            '/api/checkout/webhook/', data=payload, content_type='application/json',
            HTTP_STRIPE_SIGNATURE=signature
        )

    def test_signed_succeeded_event(self):
        """Test a correctly signed event marks the order paid"""
        payload = json.dumps(payment_event('payment_intent.succeeded', self.order.id, 'pi_signed'))
        response = self._post(payload, sign_payload(payload))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'received': True})
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.stripe_payment_id, 'pi_signed')

    def test_bad_signature(self):
        """Test a forged signature is rejected"""
        payload = json.dumps(payment_event('payment_intent.succeeded', self.order.id))
        response = self._post(payload, sign_payload(payload, secret='whsec_wrong'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Webhook error')
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_missing_signature(self):
        """Test a request without signature header is rejected"""
        payload = json.dumps(payment_event('payment_intent.succeeded', self.order.id))
        response = self._post(payload, '')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_order(self):
        """Test a signed event for an unknown order returns 400"""
        payload = json.dumps(payment_event('payment_intent.succeeded', uuid.uuid4()))
        response = self._post(payload, sign_payload(payload))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Webhook error')

    @mock.patch('stripe.Webhook.construct_event')
    def test_failed_event(self, mock_construct):
        """Test payment_failed event marks the order failed"""
        mock_construct.return_value = payment_event('payment_intent.payment_failed', self.order.id)
        response = self._post('{}', 't=1,v1=abc')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_FAILED)

    @mock.patch('shophub.checkout.views.apply_payment_event')
    @mock.patch('stripe.Webhook.construct_event')
    def test_processing_failure(self, mock_construct, mock_apply):
        """Test unexpected errors while applying an event return 400"""
        mock_construct.return_value = payment_event('payment_intent.succeeded', self.order.id)
        mock_apply.side_effect = RuntimeError('database unavailable')
        response = self._post('{}', 't=1,v1=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Webhook error')


@override_settings(STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET)
class WebhookCacheTests(TestCase):
    """Test payment updates refresh the cached dashboard"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        product = TestDataFactory.create_product(price=Decimal('60.00'))
        self.order = TestDataFactory.create_order(lines=[(product, 1)])

    def _revenue(self):
        self.client.authenticate_admin(self.admin)
        response = self.client.get('/api/admin/stats/')
        self.client.logout()
        return response.data['revenue']['total']

    def test_paid_webhook_updates_revenue(self):
        """Test a succeeded payment shows up in cached dashboard revenue"""
        self.assertEqual(self._revenue(), 0.0)

        payload = json.dumps(payment_event('payment_intent.succeeded', self.order.id, 'pi_cache'))
        response = self.client.post(
            '/api/checkout/webhook/', data=payload, content_type='application/json',
            HTTP_STRIPE_SIGNATURE=sign_payload(payload)
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._revenue(), float(self.order.total))
