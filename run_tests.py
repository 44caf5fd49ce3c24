#!/usr/bin/env python
"""
Test runner for the ShopHub apps
Usage: python run_tests.py [app ...]
"""
import os
import sys
import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'shophub.core',
    'shophub.catalog',
    'shophub.orders',
    'shophub.checkout',
    'shophub.reviews',
    'shophub.favorites',
    'shophub.reports',
]

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'shophub.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner(verbosity=2)
    labels = [f'shophub.{name}' if not name.startswith('shophub.') else name for name in sys.argv[1:]]
    failures = test_runner.run_tests(labels or APPS)
    sys.exit(bool(failures))
