from django.urls import path
from .views import favorite_list, favorite_toggle, favorite_check

urlpatterns = [
    path('favorites/', favorite_list, name='favorite-list'),
    path('favorites/check/<uuid:product_id>/', favorite_check, name='favorite-check'),
    path('favorites/<uuid:product_id>/', favorite_toggle, name='favorite-toggle'),
]
