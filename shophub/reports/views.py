import logging
from decimal import Decimal
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from rest_framework.response import Response
from django.db.models import Sum, DecimalField
from django.utils import timezone

from shophub.catalog.models import Category, Product
from shophub.core.cache_utils import get_cached, set_cached, DASHBOARD_STATS_PREFIX, DASHBOARD_STATS_CACHE_TTL
from shophub.orders.models import Order
from shophub.orders.serializers import OrderSerializer

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5


def paid_revenue(queryset):
    total = queryset.filter(payment_status=Order.PAYMENT_PAID).aggregate(
        total=Sum('total', output_field=DecimalField())
    )['total'] or Decimal('0.00')
    return float(total)


def build_dashboard_stats():
    """Store-wide counters, paid revenue and the latest orders"""
    now = timezone.localtime()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month_start = today_start.replace(day=1)

    orders = Order.objects.all()
    recent_orders = Order.objects.prefetch_related(
        'items__product__images'
    ).order_by('-created_at')[:RECENT_ORDERS_LIMIT]

    return {
        'products': {
            'total': Product.objects.count(),
            'active': Product.objects.filter(status=Product.STATUS_ACTIVE).count(),
        },
        'orders': {
            'total': orders.count(),
            'today': orders.filter(created_at__gte=today_start).count(),
            'this_month': orders.filter(created_at__gte=month_start).count(),
            'pending': orders.filter(status=Order.STATUS_PENDING).count(),
        },
        'categories': {
            'total': Category.objects.count(),
        },
        'revenue': {
            'total': paid_revenue(orders),
            'this_month': paid_revenue(orders.filter(created_at__gte=month_start)),
        },
        'recent_orders': list(OrderSerializer(recent_orders, many=True).data),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def dashboard_stats(request):
    """Admin dashboard statistics"""
    data, cache_key = get_cached(DASHBOARD_STATS_PREFIX)
    if data is None:
        data = build_dashboard_stats()
        set_cached(cache_key, data, DASHBOARD_STATS_CACHE_TTL)
        logger.debug("Dashboard stats rebuilt")

    response = Response(data)
    response['Cache-Control'] = 'private, max-age=60'
    return response
