"""
Stripe payment integration: payment intents and webhook reconciliation
"""
import logging
from decimal import Decimal

import stripe
from django.conf import settings
from django.core.exceptions import ValidationError

from shophub.core.cache_utils import invalidate_dashboard_cache
from shophub.core.utils import create_audit_log
from shophub.orders.models import Order

logger = logging.getLogger(__name__)

EVENT_PAYMENT_SUCCEEDED = 'payment_intent.succeeded'
EVENT_PAYMENT_FAILED = 'payment_intent.payment_failed'


class PaymentError(Exception):
    """Payment provider call or webhook processing failed"""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _configure():
    stripe.api_key = settings.STRIPE_SECRET_KEY
    stripe.api_version = settings.STRIPE_API_VERSION


def to_minor_units(amount):
    """Major currency units to integer cents"""
    return int(round(Decimal(str(amount)) * 100))


def create_payment_intent(amount, metadata=None):
    """
    Create a PaymentIntent for the given amount (major units, e.g. dollars)
    Raises PaymentError when Stripe rejects the request
    """
    _configure()
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=settings.STRIPE_CURRENCY,
            automatic_payment_methods={'enabled': True},
            metadata=metadata or {},
        )
    except stripe.StripeError as e:
        logger.error(f"Error creating payment intent: {str(e)}")
        raise PaymentError('Failed to create payment intent', status_code=500) from e
    logger.info(f"Payment intent {intent.id} created for amount {amount}")
    return intent


def retrieve_payment_intent(payment_intent_id):
    _configure()
    try:
        return stripe.PaymentIntent.retrieve(payment_intent_id)
    except stripe.StripeError as e:
        logger.error(f"Error retrieving payment intent {payment_intent_id}: {str(e)}")
        raise PaymentError('Failed to retrieve payment intent', status_code=502) from e


def construct_webhook_event(payload, signature):
    """
    Verify the Stripe-Signature header against the raw payload
    Raises PaymentError on a malformed payload or bad signature
    """
    _configure()
    try:
        return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError as e:
        logger.warning(f"Invalid webhook payload: {str(e)}")
        raise PaymentError('Invalid payload') from e
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Webhook signature verification failed: {str(e)}")
        raise PaymentError('Invalid signature') from e


def _lookup(obj, key):
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def apply_payment_event(event):
    """
    Reconcile a verified webhook event with order payment status.

    payment_intent.succeeded marks the order PAID and records the intent id;
    payment_intent.payment_failed marks it FAILED. Other event types, and
    intents without an orderId in their metadata, are ignored.

    Returns the updated order, or None when the event was ignored.
    Raises PaymentError when the referenced order does not exist.
    """
    event_type = _lookup(event, 'type')
    if event_type not in (EVENT_PAYMENT_SUCCEEDED, EVENT_PAYMENT_FAILED):
        logger.debug(f"Ignoring webhook event {event_type}")
        return None

    payment_intent = _lookup(_lookup(event, 'data'), 'object')
    metadata = _lookup(payment_intent, 'metadata')
    order_id = _lookup(metadata, 'orderId')
    if not order_id:
        logger.info(f"Webhook {event_type} has no orderId metadata, skipping")
        return None

    try:
        order = Order.objects.get(pk=order_id)
    except (Order.DoesNotExist, ValidationError) as e:
        logger.error(f"Webhook {event_type} references unknown order {order_id}")
        raise PaymentError('Order not found') from e

    previous = order.payment_status
    if event_type == EVENT_PAYMENT_SUCCEEDED:
        order.payment_status = Order.PAYMENT_PAID
        order.stripe_payment_id = _lookup(payment_intent, 'id')
        order.save(update_fields=['payment_status', 'stripe_payment_id', 'updated_at'])
    else:
        order.payment_status = Order.PAYMENT_FAILED
        order.save(update_fields=['payment_status', 'updated_at'])

    logger.info(f"Order {order.order_number} payment status {previous} -> {order.payment_status}")
    invalidate_dashboard_cache()
    create_audit_log(
        action='payment_status',
        model_name='Order',
        object_id=order.id,
        object_reference=order.order_number,
        changes={
            'payment_status': {'from': previous, 'to': order.payment_status},
            'event': event_type,
            'payment_intent': _lookup(payment_intent, 'id'),
        },
    )
    return order
