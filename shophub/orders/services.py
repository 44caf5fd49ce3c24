"""
Order placement: totals, order numbers and stock reservation.

Views validate the payload with OrderCreateSerializer and hand the cleaned
data to create_order(); everything that touches more than one table lives here.
"""
import logging
import time
import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.db.models import F

from shophub.catalog.models import Product
from shophub.core.cache_utils import invalidate_catalog_cache, invalidate_dashboard_cache
from .models import Order, OrderItem

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
# Order money columns are DecimalField(max_digits=10, decimal_places=2)
MAX_ORDER_AMOUNT = Decimal('99999999.99')
MAX_LINE_QUANTITY = 9999
BASE36_DIGITS = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'


class OrderError(Exception):
    """Order cannot be placed with the submitted data"""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def to_base36(number):
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return ''.join(reversed(digits))


def generate_order_number():
    """ORD-<base36 epoch millis>-<4 random hex chars>, unique across orders"""
    while True:
        millis = int(time.time() * 1000)
        order_number = f"ORD-{to_base36(millis)}-{uuid.uuid4().hex[:4].upper()}"
        if not Order.objects.filter(order_number=order_number).exists():
            return order_number


def calculate_shipping(subtotal):
    """Free shipping from the threshold up, flat fee below it"""
    if subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return Decimal('0.00')
    return settings.FLAT_SHIPPING_COST.quantize(CENTS)


def calculate_totals(lines):
    """
    Compute order totals from (unit_price, quantity) pairs.

    Returns (subtotal, shipping_cost, total) as Decimals rounded to cents.
    No tax is applied.
    """
    subtotal = Decimal('0.00')
    for unit_price, quantity in lines:
        subtotal += Decimal(str(unit_price)) * quantity
    subtotal = subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)
    shipping_cost = calculate_shipping(subtotal)
    total = (subtotal + shipping_cost).quantize(CENTS, rounding=ROUND_HALF_UP)
    return subtotal, shipping_cost, total


def reserve_stock(items):
    """
    Decrement stock for each ordered line.

    Updates are unconditional: stock is allowed to go negative.
    """
    for item in items:
        Product.objects.filter(pk=item['product_id']).update(stock=F('stock') - item['quantity'])


def create_order(data, user=None):
    """
    Place an order from validated checkout data.

    Args:
        data: dict with customer_*/shipping_* fields, ``items`` (list of
            {'product_id', 'quantity'}) and an optional ``stripe_payment_id``
        user: authenticated shopper or None for guest checkout

    Raises:
        OrderError: when a referenced product does not exist or the total
            does not fit the order amount columns
    """
    items = data['items']
    product_ids = {item['product_id'] for item in items}
    products = Product.objects.in_bulk(product_ids)

    if len(products) != len(product_ids):
        missing = sorted(str(pid) for pid in product_ids if pid not in products)
        logger.warning(f"Order rejected, unknown products: {missing}")
        raise OrderError('One or more products not found')

    order_lines = []
    for item in items:
        product = products[item['product_id']]
        order_lines.append({
            'product': product,
            'product_name': product.name,
            'quantity': item['quantity'],
            'price': product.price,
        })

    subtotal, shipping_cost, total = calculate_totals(
        (line['price'], line['quantity']) for line in order_lines
    )
    if total > MAX_ORDER_AMOUNT:
        logger.warning(f"Order rejected, total {total} exceeds {MAX_ORDER_AMOUNT}")
        raise OrderError('Order total exceeds the maximum allowed amount')

    stripe_payment_id = data.get('stripe_payment_id') or None
    order_number = generate_order_number()

    with transaction.atomic():
        order = Order.objects.create(
            order_number=order_number,
            customer_email=data['customer_email'],
            customer_name=data['customer_name'],
            customer_phone=data['customer_phone'],
            shipping_address=data['shipping_address'],
            shipping_city=data['shipping_city'],
            shipping_zip=data['shipping_zip'],
            shipping_country=data['shipping_country'],
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            total=total,
            stripe_payment_id=stripe_payment_id,
            payment_status=Order.PAYMENT_PAID if stripe_payment_id else Order.PAYMENT_PENDING,
            user=user if user is not None and user.is_authenticated else None,
        )
        OrderItem.objects.bulk_create([
            OrderItem(order=order, **line) for line in order_lines
        ])
        reserve_stock(items)
        transaction.on_commit(invalidate_catalog_cache)
        transaction.on_commit(invalidate_dashboard_cache)

    logger.info(f"Order {order.order_number} created: subtotal={subtotal} shipping={shipping_cost} "
                f"total={total} items={len(order_lines)} payment_status={order.payment_status}")
    return order


def update_order_status(order, new_status):
    """Set the fulfilment status; returns the previous value"""
    if new_status not in dict(Order.STATUS_CHOICES):
        raise OrderError(f'Invalid status: {new_status}')
    previous = order.status
    order.status = new_status
    order.save(update_fields=['status', 'updated_at'])
    logger.info(f"Order {order.order_number} status {previous} -> {new_status}")
    invalidate_dashboard_cache()
    return previous
