from django.contrib import admin
from django.utils.html import format_html
from .models import Category, Product, ProductImage


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'product_count', 'created_at']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    ordering = ['name']

    def product_count(self, obj):
        return obj.products.count()
    product_count.short_description = 'Products'


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 1
    fields = ['url', 'position', 'preview']
    readonly_fields = ['preview']

    def preview(self, obj):
        if obj and obj.url:
            return format_html('<img src="{}" style="max-height: 60px;" />', obj.url)
        return '-'


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'category', 'price', 'compare_price', 'stock', 'status', 'updated_at']
    list_filter = ['status', 'category', 'created_at']
    list_editable = ['stock', 'status']
    search_fields = ['name', 'sku', 'description']
    prepopulated_fields = {'slug': ('name',)}
    ordering = ['name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [ProductImageInline]
