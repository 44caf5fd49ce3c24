from django.urls import path
from .views import product_reviews, review_detail

urlpatterns = [
    path('reviews/product/<uuid:product_id>/', product_reviews, name='product-reviews'),
    path('reviews/<int:pk>/', review_detail, name='review-detail'),
]
