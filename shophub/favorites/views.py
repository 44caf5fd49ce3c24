import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.db.models import Prefetch
from shophub.catalog.models import Product, ProductImage
from shophub.catalog.serializers import ProductListSerializer
from shophub.core.utils import create_audit_log
from .models import Favorite

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def favorite_list(request):
    """Current user's favorite products, most recently added first"""
    favorites = Favorite.objects.filter(user=request.user).select_related(
        'product__category'
    ).prefetch_related(
        Prefetch('product__images', queryset=ProductImage.objects.order_by('position', 'id'))
    ).order_by('-created_at', '-id')
    products = [favorite.product for favorite in favorites]
    return Response(ProductListSerializer(products, many=True).data)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def favorite_toggle(request, product_id):
    """
    POST: add a product to favorites (no-op when already present)
    DELETE: remove it (no-op when absent)
    """
    if request.method == 'DELETE':
        deleted, _ = Favorite.objects.filter(user=request.user, product_id=product_id).delete()
        if deleted:
            create_audit_log(
                request=request,
                action='favorite_remove',
                model_name='Favorite',
                object_id=product_id,
            )
        return Response({'success': True})

    product = Product.objects.filter(pk=product_id).first()
    if not product:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)

    favorite, created = Favorite.objects.get_or_create(user=request.user, product=product)
    if not created:
        return Response({'success': True, 'message': 'Already in favorites'})

    logger.debug(f"User {request.user.id} favorited product {product.slug}")
    create_audit_log(
        request=request,
        action='favorite_add',
        model_name='Favorite',
        object_id=product.id,
        object_reference=product.slug,
    )
    return Response({'success': True}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def favorite_check(request, product_id):
    """Whether the product is in the current user's favorites"""
    is_favorite = Favorite.objects.filter(user=request.user, product_id=product_id).exists()
    return Response({'is_favorite': is_favorite})
