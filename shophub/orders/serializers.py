from rest_framework import serializers
from shophub.catalog.serializers import ProductSummarySerializer
from .models import Order, OrderItem
from .services import MAX_LINE_QUANTITY


class OrderItemSerializer(serializers.ModelSerializer):
    product = ProductSummarySerializer(read_only=True)
    product_id = serializers.UUIDField(read_only=True)
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = ['id', 'product_id', 'product', 'product_name', 'quantity', 'price', 'line_total']

    def get_line_total(self, obj):
        return f"{obj.get_line_total():.2f}"


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'customer_email', 'customer_name', 'customer_phone',
                  'shipping_address', 'shipping_city', 'shipping_zip', 'shipping_country',
                  'subtotal', 'shipping_cost', 'total', 'status', 'payment_status',
                  'stripe_payment_id', 'user', 'items', 'created_at', 'updated_at']


class OrderCreateItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY)


class OrderCreateSerializer(serializers.Serializer):
    """Checkout payload: customer contact, shipping address and cart lines"""
    customer_email = serializers.EmailField()
    customer_name = serializers.CharField(min_length=1, max_length=200)
    customer_phone = serializers.CharField(min_length=1, max_length=50)
    shipping_address = serializers.CharField(min_length=1, max_length=255)
    shipping_city = serializers.CharField(min_length=1, max_length=100)
    shipping_zip = serializers.CharField(min_length=1, max_length=20)
    shipping_country = serializers.CharField(min_length=1, max_length=100)
    items = OrderCreateItemSerializer(many=True, allow_empty=False)
    stripe_payment_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
