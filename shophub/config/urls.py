"""
URL configuration for the ShopHub backend.

Public storefront endpoints live under /api/, the back-office API under
/api/admin/ and the Django admin site (catalog management) under /admin/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "ShopHub Admin Panel"
admin.site.site_title = "ShopHub Admin Portal"
admin.site.index_title = "Welcome to ShopHub Admin"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('shophub.core.urls')),
    path('api/', include('shophub.catalog.urls')),
    path('api/', include('shophub.orders.urls')),
    path('api/', include('shophub.checkout.urls')),
    path('api/', include('shophub.reviews.urls')),
    path('api/', include('shophub.favorites.urls')),
    path('api/', include('shophub.reports.urls')),
]
