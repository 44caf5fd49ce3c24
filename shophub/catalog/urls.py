from django.urls import path
from .views import (
    product_list, product_search, product_detail,
    category_list, category_products,
)

urlpatterns = [
    # Product endpoints
    path('products/', product_list, name='product-list'),
    path('products/search/', product_search, name='product-search'),
    path('products/<slug:slug>/', product_detail, name='product-detail'),

    # Category endpoints
    path('categories/', category_list, name='category-list'),
    path('categories/<slug:slug>/products/', category_products, name='category-products'),
]
