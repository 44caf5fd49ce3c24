import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework.response import Response
from django.db.models import Prefetch
from shophub.catalog.models import ProductImage
from shophub.core.authentication import OptionalJWTAuthentication
from shophub.core.utils import create_audit_log, paginate
from .filters import OrderFilter
from .models import Order, OrderItem
from .serializers import OrderSerializer, OrderCreateSerializer, OrderStatusSerializer
from .services import create_order, update_order_status, OrderError

logger = logging.getLogger(__name__)


def orders_with_items():
    """Orders with items, their products and product images prefetched"""
    return Order.objects.prefetch_related(
        Prefetch('items', queryset=OrderItem.objects.select_related('product').prefetch_related(
            Prefetch('product__images', queryset=ProductImage.objects.order_by('position', 'id'))
        ))
    )


@api_view(['POST'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([AllowAny])
def order_create(request):
    """Create an order (guest or authenticated)"""
    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.info(f"Order validation failed: {serializer.errors}")
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    try:
        order = create_order(serializer.validated_data, user=request.user)
    except OrderError as e:
        return Response({'error': e.message}, status=e.status_code)

    create_audit_log(
        request=request,
        action='order_create',
        model_name='Order',
        object_id=order.id,
        object_reference=order.order_number,
        changes={'total': str(order.total), 'payment_status': order.payment_status},
    )

    order = orders_with_items().get(pk=order.pk)
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def order_detail(request, pk):
    """Get order by ID (order confirmation page)"""
    order = orders_with_items().filter(pk=pk).first()
    if not order:
        return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(OrderSerializer(order).data)


# Shopper order history
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_order_list(request):
    """Orders placed by the current user, newest first"""
    queryset = orders_with_items().filter(user=request.user).order_by('-created_at')
    items, pagination = paginate(request, queryset, default_limit=10)
    return Response({
        'orders': OrderSerializer(items, many=True).data,
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_order_detail(request, pk):
    """One of the current user's orders"""
    order = orders_with_items().filter(pk=pk, user=request.user).first()
    if not order:
        return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(OrderSerializer(order).data)


# Admin order management
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_list(request):
    """List all orders with status, payment status and text filters"""
    order_filter = OrderFilter(request.query_params, queryset=orders_with_items())
    if not order_filter.is_valid():
        return Response({'error': 'Validation failed', 'details': order_filter.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    queryset = order_filter.qs.order_by('-created_at')
    items, pagination = paginate(request, queryset, default_limit=20)
    return Response({
        'orders': OrderSerializer(items, many=True).data,
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_detail(request, pk):
    """Get any order by ID"""
    order = orders_with_items().filter(pk=pk).first()
    if not order:
        return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_status(request, pk):
    """Update order fulfilment status"""
    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    order = Order.objects.filter(pk=pk).first()
    if not order:
        return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)

    new_status = serializer.validated_data['status']
    previous = update_order_status(order, new_status)
    create_audit_log(
        request=request,
        action='order_status',
        model_name='Order',
        object_id=order.id,
        object_reference=order.order_number,
        changes={'status': {'from': previous, 'to': new_status}},
    )

    order = orders_with_items().get(pk=order.pk)
    return Response(OrderSerializer(order).data)
