from django.urls import path
from .views import (
    order_create, order_detail,
    user_order_list, user_order_detail,
    admin_order_list, admin_order_detail, admin_order_status,
)

urlpatterns = [
    # Storefront order endpoints
    path('orders/', order_create, name='order-create'),
    path('orders/<uuid:pk>/', order_detail, name='order-detail'),

    # Shopper order history
    path('user/orders/', user_order_list, name='user-order-list'),
    path('user/orders/<uuid:pk>/', user_order_detail, name='user-order-detail'),

    # Admin order endpoints
    path('admin/orders/', admin_order_list, name='admin-order-list'),
    path('admin/orders/<uuid:pk>/', admin_order_detail, name='admin-order-detail'),
    path('admin/orders/<uuid:pk>/status/', admin_order_status, name='admin-order-status'),
]
