"""
Management command to seed the storefront with an admin account and demo catalog
"""
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from shophub.catalog.models import Category, Product, ProductImage
from shophub.core.cache_utils import invalidate_catalog_cache

User = get_user_model()

UNSPLASH = 'https://images.unsplash.com/'

CATEGORIES = [
    # (name, slug, description, image)
    ('Electronics', 'electronics', 'Gadgets and electronic devices', 'photo-1498049794561-7780e7231661'),
    ('Clothing', 'clothing', 'Fashion and apparel', 'photo-1489987707025-afc232f7ea0f'),
    ('Home & Garden', 'home-garden', 'Home decor and garden supplies', 'photo-1484101403633-562f891dc89a'),
    ('Sports & Outdoors', 'sports', 'Sports equipment and outdoor gear', 'photo-1461896836934-ffe607ba8211'),
    ('Books', 'books', 'Books and educational materials', 'photo-1512820790803-83ca734da794'),
    ('Beauty & Health', 'beauty', 'Beauty and health products', 'photo-1596462502278-27bfdc403348'),
    ('Toys & Games', 'toys', 'Toys and games for all ages', 'photo-1558060370-d644479cb6f7'),
    ('Automotive', 'automotive', 'Auto parts and accessories', 'photo-1489824904134-891ab64532f1'),
]

PRODUCTS = [
    # (name, slug, description, price, compare_price, sku, stock, category slug, images)
    ('Wireless Bluetooth Headphones', 'wireless-bluetooth-headphones',
     'Premium wireless headphones with active noise cancellation, 30-hour battery life, and crystal-clear sound quality.',
     '149.99', '199.99', 'WBH-001', 50, 'electronics',
     ['photo-1505740420928-5e560c06d30e', 'photo-1484704849700-f032a568e944']),
    ('Smart Watch Pro', 'smart-watch-pro',
     'Advanced smartwatch with health monitoring, GPS, and seamless smartphone integration.',
     '299.99', None, 'SWP-001', 30, 'electronics', ['photo-1523275335684-37898b6baf30']),
    ('Portable Bluetooth Speaker', 'portable-bluetooth-speaker',
     'Waterproof portable speaker with 360-degree sound and 12-hour playtime.',
     '79.99', '99.99', 'PBS-001', 100, 'electronics', ['photo-1608043152269-423dbba4e7e1']),
    ('Wireless Charging Pad', 'wireless-charging-pad',
     'Fast wireless charger compatible with all Qi-enabled devices.',
     '34.99', None, 'WCP-001', 120, 'electronics', ['photo-1586816879360-004f5b0c51e5']),
    ('USB-C Hub Adapter', 'usb-c-hub-adapter',
     '7-in-1 USB-C hub with HDMI, USB 3.0, SD card reader, and power delivery.',
     '49.99', '69.99', 'UCH-001', 80, 'electronics', ['photo-1593642532400-2682810df593']),
    ('Classic Cotton T-Shirt', 'classic-cotton-tshirt',
     '100% organic cotton t-shirt. Comfortable, breathable, and perfect for everyday wear.',
     '29.99', None, 'CCT-001', 200, 'clothing', ['photo-1521572163474-6864f9cf17ab']),
    ('Denim Jacket', 'denim-jacket',
     'Classic denim jacket with modern fit. Perfect for layering in any season.',
     '89.99', '119.99', 'DJ-001', 45, 'clothing', ['photo-1576995853123-5a10305d93c0']),
    ('Wool Sweater', 'wool-sweater',
     'Soft merino wool sweater, perfect for cold weather.',
     '79.99', '99.99', 'WS-001', 60, 'clothing', ['photo-1434389677669-e08b4cac3105']),
    ('Casual Hoodie', 'casual-hoodie',
     'Comfortable cotton blend hoodie with kangaroo pocket.',
     '59.99', None, 'CH-001', 150, 'clothing', ['photo-1556821840-3a63f95609a7']),
    ('Running Sneakers', 'running-sneakers',
     'Lightweight running shoes with responsive cushioning and breathable mesh upper.',
     '129.99', None, 'RS-001', 75, 'sports', ['photo-1542291026-7eec264c27ff']),
    ('Yoga Mat Premium', 'yoga-mat-premium',
     'Extra thick yoga mat with non-slip surface. Perfect for yoga, pilates, and meditation.',
     '49.99', '69.99', 'YMP-001', 150, 'sports', ['photo-1601925260368-ae2f83cf8b7f']),
    ('Fitness Dumbbells Set', 'fitness-dumbbells-set',
     'Adjustable dumbbell set from 5 to 25 lbs. Perfect for home workouts.',
     '199.99', '249.99', 'FDS-001', 40, 'sports', ['photo-1534438327276-14e5300c3a48']),
    ('Resistance Bands Set', 'resistance-bands-set',
     'Set of 5 resistance bands with different strengths for full-body workout.',
     '24.99', None, 'RBS-001', 200, 'sports', ['photo-1598289431512-b97b0917affc']),
    ('Modern Table Lamp', 'modern-table-lamp',
     'Minimalist table lamp with adjustable brightness and warm LED light.',
     '59.99', None, 'MTL-001', 60, 'home-garden', ['photo-1507473885765-e6ed057f782c']),
    ('Indoor Plant Set', 'indoor-plant-set',
     'Set of 3 easy-care indoor plants in decorative ceramic pots.',
     '44.99', '59.99', 'IPS-001', 40, 'home-garden', ['photo-1416879595882-3373a0480b5b']),
    ('Throw Blanket', 'throw-blanket',
     'Soft and cozy throw blanket, perfect for living room or bedroom.',
     '39.99', None, 'TB-001', 100, 'home-garden', ['photo-1555041469-a586c61ea9bc']),
    ('Decorative Pillows Set', 'decorative-pillows-set',
     'Set of 2 decorative pillows with modern geometric patterns.',
     '34.99', '49.99', 'DPS-001', 80, 'home-garden', ['photo-1584100936595-c0654b55a2e2']),
    ('JavaScript Guide', 'javascript-guide',
     'Complete guide to modern JavaScript development.',
     '39.99', None, 'JSG-001', 100, 'books', ['photo-1544716278-ca5e3f4abd8c']),
    ('Design Patterns Book', 'design-patterns-book',
     'Learn essential design patterns for software development.',
     '44.99', '54.99', 'DPB-001', 75, 'books', ['photo-1532012197267-da84d127e765']),
    ('Skincare Set', 'skincare-set',
     'Complete skincare routine set with cleanser, toner, and moisturizer.',
     '89.99', '119.99', 'SS-001', 60, 'beauty', ['photo-1556228720-195a672e8a03']),
    ('Hair Care Bundle', 'hair-care-bundle',
     'Professional hair care bundle with shampoo, conditioner, and hair mask.',
     '54.99', None, 'HCB-001', 90, 'beauty', ['photo-1522337360788-8b13dee7a37e']),
    ('Building Blocks Set', 'building-blocks-set',
     '500-piece building blocks set for creative play.',
     '34.99', '44.99', 'BBS-001', 120, 'toys', ['photo-1587654780291-39c9404d746b']),
    ('RC Racing Car', 'rc-racing-car',
     'High-speed remote control racing car with rechargeable battery.',
     '49.99', None, 'RCC-001', 50, 'toys', ['photo-1594787318286-3d835c1d207f']),
    ('Car Phone Mount', 'car-phone-mount',
     'Universal car phone mount with 360-degree rotation.',
     '19.99', '29.99', 'CPM-001', 200, 'automotive', ['photo-1563298723-dcfebaa392e3']),
    ('Car Vacuum Cleaner', 'car-vacuum-cleaner',
     'Portable car vacuum cleaner with strong suction power.',
     '39.99', None, 'CVC-001', 80, 'automotive', ['photo-1558618666-fcd25c85cd64']),
]


class Command(BaseCommand):
    help = "Seeds the store with an admin account, categories and demo products"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing products and categories before seeding',
        )
        parser.add_argument('--admin-email', default='admin@shop-hub.com')
        parser.add_argument('--admin-password', default='admin123')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING STORE"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        if options['clear']:
            self.stdout.write(self.style.WARNING("Clearing products and categories..."))
            Product.objects.all().delete()
            Category.objects.all().delete()

        admin = User.objects.filter(email=options['admin_email']).first()
        if admin:
            self.stdout.write(f"  - Admin {admin.email} already exists")
        else:
            admin = User.objects.create_superuser(
                email=options['admin_email'],
                password=options['admin_password'],
                name='Admin',
            )
            self.stdout.write(self.style.SUCCESS(f"  ✓ Created admin {admin.email}"))

        categories = {}
        for name, slug, description, image in CATEGORIES:
            category, created = Category.objects.get_or_create(
                slug=slug,
                defaults={
                    'name': name,
                    'description': description,
                    'image': f'{UNSPLASH}{image}?w=400',
                },
            )
            categories[slug] = category
            if created:
                self.stdout.write(self.style.SUCCESS(f"  ✓ Created category: {name}"))

        created_count = 0
        skipped_count = 0
        for name, slug, description, price, compare_price, sku, stock, category_slug, images in PRODUCTS:
            if Product.objects.filter(slug=slug).exists():
                skipped_count += 1
                continue
            product = Product.objects.create(
                name=name,
                slug=slug,
                description=description,
                price=Decimal(price),
                compare_price=Decimal(compare_price) if compare_price else None,
                sku=sku,
                stock=stock,
                status=Product.STATUS_ACTIVE,
                category=categories[category_slug],
            )
            ProductImage.objects.bulk_create([
                ProductImage(product=product, url=f'{UNSPLASH}{image}?w=800', position=position)
                for position, image in enumerate(images)
            ])
            created_count += 1
            self.stdout.write(f"  ✓ Created product: {name}")

        invalidate_catalog_cache()

        self.stdout.write(self.style.SUCCESS(
            f"\nCompleted: {len(categories)} categories, {created_count} products created, {skipped_count} skipped"
        ))
