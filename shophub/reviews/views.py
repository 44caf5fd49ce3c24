import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count
from shophub.catalog.models import Product
from shophub.core.utils import create_audit_log, paginate
from .models import Review
from .serializers import ReviewSerializer

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW_ERROR = 'You have already reviewed this product'


def review_stats(product_id):
    stats = Review.objects.filter(product_id=product_id).aggregate(
        average_rating=Avg('rating'),
        total_reviews=Count('id'),
    )
    return {
        'average_rating': float(stats['average_rating'] or 0),
        'total_reviews': stats['total_reviews'],
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def product_reviews(request, product_id):
    """
    GET: list a product's reviews (newest first) with rating stats
    POST: add the current user's review of the product
    """
    if request.method == 'GET':
        queryset = Review.objects.filter(product_id=product_id).select_related('user').order_by('-created_at', '-id')
        items, pagination = paginate(request, queryset, default_limit=10)
        return Response({
            'reviews': ReviewSerializer(items, many=True).data,
            'stats': review_stats(product_id),
            'pagination': pagination,
        })

    serializer = ReviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    product = Product.objects.filter(pk=product_id).first()
    if not product:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)

    if Review.objects.filter(user=request.user, product=product).exists():
        return Response({'error': DUPLICATE_REVIEW_ERROR}, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            review = serializer.save(user=request.user, product=product)
    except IntegrityError:
        return Response({'error': DUPLICATE_REVIEW_ERROR}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Review {review.id} created for product {product.slug} by user {request.user.id}")
    create_audit_log(
        request=request,
        action='review_create',
        model_name='Review',
        object_id=review.id,
        object_reference=product.slug,
        changes={'rating': review.rating},
    )
    return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def review_detail(request, pk):
    """Update or delete one of the current user's reviews"""
    review = Review.objects.select_related('user', 'product').filter(pk=pk).first()
    if not review:
        return Response({'error': 'Review not found'}, status=status.HTTP_404_NOT_FOUND)

    if review.user_id != request.user.id:
        return Response({'error': 'Not authorized'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        review_id = review.id
        product_slug = review.product.slug
        review.delete()
        create_audit_log(
            request=request,
            action='review_delete',
            model_name='Review',
            object_id=review_id,
            object_reference=product_slug,
        )
        return Response({'success': True})

    serializer = ReviewSerializer(review, data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    old_rating = review.rating
    review = serializer.save()
    create_audit_log(
        request=request,
        action='review_update',
        model_name='Review',
        object_id=review.id,
        object_reference=review.product.slug,
        changes={'rating': {'from': old_rating, 'to': review.rating}},
    )
    return Response(ReviewSerializer(review).data)
