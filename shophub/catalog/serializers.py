from rest_framework import serializers
from .models import Category, Product, ProductImage


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'image', 'created_at']


class CategoryWithCountSerializer(CategorySerializer):
    product_count = serializers.IntegerField(read_only=True)

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ['product_count']


class ProductImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductImage
        fields = ['id', 'url', 'position']


class ProductListSerializer(serializers.ModelSerializer):
    """Card representation: category and cover image only"""
    category = CategorySerializer(read_only=True)
    images = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'description', 'price', 'compare_price', 'sku', 'stock',
                  'status', 'category', 'images', 'created_at', 'updated_at']

    def get_images(self, obj):
        """Cover image (lowest position), uses prefetched images when available"""
        images = list(obj.images.all())[:1]
        return ProductImageSerializer(images, many=True).data


class ProductSerializer(ProductListSerializer):
    """Detail representation with the full gallery"""
    images = ProductImageSerializer(many=True, read_only=True)


class ProductSummarySerializer(serializers.ModelSerializer):
    """Compact product reference embedded in orders, reviews and favorites"""
    image = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'price', 'stock', 'status', 'image']

    def get_image(self, obj):
        first_image = next(iter(obj.images.all()), None)
        return first_image.url if first_image else None
