import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.db.models import Count, Prefetch, Q
from shophub.core.cache_utils import (
    get_cached, set_cached,
    PRODUCTS_LIST_PREFIX, PRODUCTS_LIST_CACHE_TTL, CATEGORIES_PREFIX, CATEGORIES_CACHE_TTL,
)
from shophub.core.utils import paginate
from .filters import ProductFilter
from .models import Category, Product, ProductImage
from .serializers import (
    CategorySerializer, CategoryWithCountSerializer, ProductListSerializer, ProductSerializer,
)

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {'created_at', 'updated_at', 'price', 'name'}


def active_products():
    """ACTIVE products with category and ordered images prefetched"""
    return Product.objects.filter(status=Product.STATUS_ACTIVE).select_related('category').prefetch_related(
        Prefetch('images', queryset=ProductImage.objects.order_by('position', 'id'))
    )


def get_ordering(request):
    """Translate sort/order query params into an order_by expression"""
    sort = request.query_params.get('sort', 'created_at')
    if sort not in SORTABLE_FIELDS:
        sort = 'created_at'
    order = request.query_params.get('order', 'desc').lower()
    return sort if order == 'asc' else f'-{sort}'


@api_view(['GET'])
@permission_classes([AllowAny])
def product_list(request):
    """List ACTIVE products with filters, sorting and pagination"""
    params = {key: request.query_params.get(key) for key in request.query_params}
    cached_data, cache_key = get_cached(PRODUCTS_LIST_PREFIX, **params)
    if cached_data is not None:
        return Response(cached_data)

    product_filter = ProductFilter(request.query_params, queryset=active_products())
    if not product_filter.is_valid():
        return Response({'error': 'Validation failed', 'details': product_filter.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    queryset = product_filter.qs.order_by(get_ordering(request), 'id')
    items, pagination = paginate(request, queryset, default_limit=12)
    data = {
        'products': ProductListSerializer(items, many=True).data,
        'pagination': pagination,
    }
    set_cached(cache_key, data, PRODUCTS_LIST_CACHE_TTL)
    return Response(data)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_search(request):
    """Quick search over ACTIVE product names and descriptions"""
    query = request.query_params.get('q', '').strip()
    if not query:
        return Response({'products': []})

    try:
        limit = max(1, min(int(request.query_params.get('limit', 10)), 50))
    except (TypeError, ValueError):
        limit = 10

    products = active_products().filter(
        Q(name__icontains=query) | Q(description__icontains=query)
    ).order_by('name')[:limit]
    return Response({'products': ProductListSerializer(products, many=True).data})


@api_view(['GET'])
@permission_classes([AllowAny])
def product_detail(request, slug):
    """Get a product by slug with its full gallery"""
    product = Product.objects.select_related('category').prefetch_related('images').filter(slug=slug).first()
    if not product:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(ProductSerializer(product).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def category_list(request):
    """All categories ordered by name with their product counts"""
    cached_data, cache_key = get_cached(CATEGORIES_PREFIX)
    if cached_data is not None:
        return Response(cached_data)

    categories = Category.objects.annotate(product_count=Count('products')).order_by('name')
    data = CategoryWithCountSerializer(categories, many=True).data
    set_cached(cache_key, data, CATEGORIES_CACHE_TTL)
    return Response(data)


@api_view(['GET'])
@permission_classes([AllowAny])
def category_products(request, slug):
    """ACTIVE products of one category, paginated"""
    category = Category.objects.filter(slug=slug).first()
    if not category:
        return Response({'error': 'Category not found'}, status=status.HTTP_404_NOT_FOUND)

    queryset = active_products().filter(category=category).order_by(get_ordering(request), 'id')
    items, pagination = paginate(request, queryset, default_limit=12)
    return Response({
        'category': CategorySerializer(category).data,
        'products': ProductListSerializer(items, many=True).data,
        'pagination': pagination,
    })
