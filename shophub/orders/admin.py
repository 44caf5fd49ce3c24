from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ['product', 'product_name', 'quantity', 'price']
    readonly_fields = ['product', 'product_name', 'quantity', 'price']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer_name', 'customer_email', 'total', 'status', 'payment_status', 'created_at']
    list_filter = ['status', 'payment_status', 'created_at']
    search_fields = ['order_number', 'customer_email', 'customer_name', 'stripe_payment_id']
    ordering = ['-created_at']
    readonly_fields = ['id', 'order_number', 'subtotal', 'shipping_cost', 'total', 'stripe_payment_id', 'user', 'created_at', 'updated_at']
    inlines = [OrderItemInline]
    fieldsets = (
        ('Order', {
            'fields': ('id', 'order_number', 'status', 'payment_status', 'stripe_payment_id', 'user')
        }),
        ('Customer', {
            'fields': ('customer_name', 'customer_email', 'customer_phone')
        }),
        ('Shipping', {
            'fields': ('shipping_address', 'shipping_city', 'shipping_zip', 'shipping_country')
        }),
        ('Totals', {
            'fields': ('subtotal', 'shipping_cost', 'total')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )
