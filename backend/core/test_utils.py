"""
Test utilities and factories for creating test data
"""
from decimal import Decimal
import random
import string

from backend.catalog.models import Category, Product


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_category(name=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(name=name)

    @staticmethod
    def create_product(name=None, category=None, price=None, stock=10, description=''):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not category:
            category = TestDataFactory.create_category()
        if price is None:
            price = Decimal('5.00')
        return Product.objects.create(
            name=name,
            description=description,
            price=price,
            stock=stock,
            category=category,
        )

    @staticmethod
    def product_payload(category, **overrides):
        """Request body for POST/PUT /products"""
        data = {
            'name': f'Product_{TestDataFactory.random_string(6)}',
            'description': 'Test product',
            'price': '9.99',
            'stock': '10',
            'categoryId': category.id,
        }
        data.update(overrides)
        return data
