from django.urls import path
from .views import create_intent, webhook

urlpatterns = [
    path('checkout/create-intent/', create_intent, name='checkout-create-intent'),
    path('checkout/webhook/', webhook, name='checkout-webhook'),
]
