import logging
from decimal import Decimal, InvalidOperation
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from .payment_service import (
    create_payment_intent, construct_webhook_event, apply_payment_event, PaymentError,
)

logger = logging.getLogger(__name__)


def _parse_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def create_intent(request):
    """Create a Stripe PaymentIntent for the checkout total"""
    amount = _parse_amount(request.data.get('amount'))
    if amount is None:
        return Response({'error': 'Invalid amount'}, status=status.HTTP_400_BAD_REQUEST)

    order_id = request.data.get('order_id') or ''
    try:
        intent = create_payment_intent(amount, {'orderId': str(order_id)})
    except PaymentError as e:
        return Response({'error': e.message}, status=e.status_code)

    return Response({
        'client_secret': intent.client_secret,
        'payment_intent_id': intent.id,
    })


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def webhook(request):
    """Stripe webhook: verify the signature and reconcile payment status"""
    signature = request.META.get('HTTP_STRIPE_SIGNATURE', '')
    try:
        event = construct_webhook_event(request.body, signature)
        apply_payment_event(event)
    except PaymentError as e:
        logger.error(f"Webhook error: {e.message}")
        return Response({'error': 'Webhook error'}, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.exception(f"Webhook processing failed: {str(e)}")
        return Response({'error': 'Webhook error'}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'received': True})
