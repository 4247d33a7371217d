"""
Test suite for the Catalog module
Tests: Category and Product endpoints, referential integrity, store error mapping
"""
from decimal import Decimal

from django.db import IntegrityError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from backend.catalog.models import Category, Product
from backend.catalog.store import CatalogStore, classify_integrity_error
from backend.core.exceptions import StoreError, StoreErrorKind
from backend.core.test_utils import TestDataFactory

CATEGORIES_URL = '/api/v1/categories/'
PRODUCTS_URL = '/api/v1/products/'


def category_url(pk):
    return f'{CATEGORIES_URL}{pk}/'


def product_url(pk):
    return f'{PRODUCTS_URL}{pk}/'


class CategoryAPITests(TestCase):
    """Test Category API endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_list_categories_ordered_by_name(self):
        TestDataFactory.create_category(name='Vitamins')
        TestDataFactory.create_category(name='Analgesics')
        TestDataFactory.create_category(name='First Aid')
        response = self.client.get(CATEGORIES_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.json()], ['Analgesics', 'First Aid', 'Vitamins'])

    def test_list_without_trailing_slash(self):
        TestDataFactory.create_category(name='Analgesics')
        response = self.client.get('/api/v1/categories')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.json()), 1)

    def test_create_then_get(self):
        response = self.client.post(CATEGORIES_URL, {'name': 'Antibiotics'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertIsInstance(body['id'], int)
        self.assertEqual(body['name'], 'Antibiotics')

        response = self.client.get(category_url(body['id']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['name'], 'Antibiotics')
        self.assertEqual(response.json()['products'], [])

    def test_create_trims_name(self):
        response = self.client.post(CATEGORIES_URL, {'name': '  Dermatology  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['name'], 'Dermatology')

    def test_create_without_name(self):
        response = self.client.post(CATEGORIES_URL, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.json()['message'])
        self.assertEqual(Category.objects.count(), 0)

    def test_create_blank_name(self):
        response = self.client.post(CATEGORIES_URL, {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_non_string_name(self):
        response = self.client.post(CATEGORIES_URL, {'name': 123}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Category.objects.count(), 0)

    def test_create_duplicate_name(self):
        first = self.client.post(CATEGORIES_URL, {'name': 'Antiseptics'}, format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        second = self.client.post(CATEGORIES_URL, {'name': ' Antiseptics '}, format='json')
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.json(), {'message': 'A category with this name already exists.'})
        self.assertEqual(Category.objects.count(), 1)

    def test_create_malformed_json(self):
        response = self.client.post(CATEGORIES_URL, data='{"name": ', content_type='application/json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('message', response.json())

    def test_get_with_products(self):
        category = TestDataFactory.create_category(name='Analgesics')
        TestDataFactory.create_product(name='Paracetamol', category=category)
        TestDataFactory.create_product(name='Ibuprofen', category=category)
        response = self.client.get(category_url(category.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in response.json()['products']], ['Ibuprofen', 'Paracetamol'])

    def test_get_invalid_id(self):
        response = self.client.get(category_url('abc'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {'message': 'Invalid category id.'})

    def test_get_not_found(self):
        response = self.client.get(category_url(9999))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json(), {'message': 'Category not found.'})

    def test_update_name(self):
        category = TestDataFactory.create_category(name='Vitamins')
        response = self.client.put(category_url(category.id), {'name': 'Vitamins and Supplements'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['name'], 'Vitamins and Supplements')
        category.refresh_from_db()
        self.assertEqual(category.name, 'Vitamins and Supplements')

    def test_update_to_duplicate_name(self):
        TestDataFactory.create_category(name='Analgesics')
        category = TestDataFactory.create_category(name='Antibiotics')
        response = self.client.put(category_url(category.id), {'name': 'Analgesics'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        category.refresh_from_db()
        self.assertEqual(category.name, 'Antibiotics')

    def test_update_not_found(self):
        response = self.client.put(category_url(9999), {'name': 'Anything'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_blank_name(self):
        category = TestDataFactory.create_category(name='Analgesics')
        response = self.client.put(category_url(category.id), {'name': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_category(self):
        category = TestDataFactory.create_category()
        response = self.client.delete(category_url(category.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'message': 'Category deleted successfully.'})
        response = self.client.get(category_url(category.id))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_category_with_products(self):
        category = TestDataFactory.create_category(name='Analgesics')
        product = TestDataFactory.create_product(name='Aspirin', category=category)
        response = self.client.delete(category_url(category.id))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('associated products', response.json()['message'])
        self.assertTrue(Category.objects.filter(pk=category.id).exists())
        product.refresh_from_db()
        self.assertEqual(product.category_id, category.id)

    def test_delete_not_found(self):
        response = self.client.delete(category_url(9999))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_invalid_id(self):
        response = self.client.delete(category_url('1.5'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_not_allowed(self):
        category = TestDataFactory.create_category()
        response = self.client.patch(category_url(category.id), {'name': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertIn('message', response.json())


class ProductAPITests(TestCase):
    """Test Product API endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.category = TestDataFactory.create_category(name='Analgesics')

    def test_create_and_get_round_trip(self):
        data = {'name': 'Aspirin', 'price': '9.99', 'stock': '10', 'categoryId': self.category.id}
        response = self.client.post(PRODUCTS_URL, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product_id = response.json()['id']

        response = self.client.get(product_url(product_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['name'], 'Aspirin')
        self.assertEqual(body['price'], 9.99)
        self.assertEqual(body['stock'], 10)
        self.assertEqual(body['description'], '')
        self.assertEqual(body['categoryId'], self.category.id)
        self.assertEqual(body['category']['name'], 'Analgesics')

    def test_create_with_numeric_values(self):
        data = TestDataFactory.product_payload(self.category, price=12.5, stock=0)
        response = self.client.post(PRODUCTS_URL, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(pk=response.json()['id'])
        self.assertEqual(product.price, Decimal('12.50'))
        self.assertEqual(product.stock, 0)

    def test_create_null_description(self):
        data = TestDataFactory.product_payload(self.category, description=None)
        response = self.client.post(PRODUCTS_URL, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['description'], '')

    def test_create_rounds_price_to_cents(self):
        cases = [
            ('9.999', Decimal('10.00')),
            ('19.995', Decimal('20.00')),
            ('4.994', Decimal('4.99')),
            (0.30000000000000004, Decimal('0.30')),
        ]
        for price, expected in cases:
            data = TestDataFactory.product_payload(self.category, price=price)
            response = self.client.post(PRODUCTS_URL, data, format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED, price)
            self.assertEqual(response.json()['price'], float(expected))
            product = Product.objects.get(pk=response.json()['id'])
            self.assertEqual(product.price, expected)

    def test_create_price_out_of_range(self):
        for price in ('0.001', '100000000', '99999999.995', '1e40', '-1e40'):
            data = TestDataFactory.product_payload(self.category, price=price)
            response = self.client.post(PRODUCTS_URL, data, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, price)
            self.assertIn('price', response.json()['message'])
        self.assertEqual(Product.objects.count(), 0)

    def test_create_unknown_category(self):
        data = TestDataFactory.product_payload(self.category, categoryId=9999)
        response = self.client.post(PRODUCTS_URL, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {'message': 'The provided categoryId does not exist.'})
        self.assertEqual(Product.objects.count(), 0)

    def test_create_missing_fields(self):
        for field in ('name', 'price', 'stock', 'categoryId'):
            data = TestDataFactory.product_payload(self.category)
            del data[field]
            response = self.client.post(PRODUCTS_URL, data, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, field)
            self.assertIn(field, response.json()['message'])
        self.assertEqual(Product.objects.count(), 0)

    def test_create_invalid_numbers(self):
        invalid = [
            {'price': 'abc'},
            {'price': '0'},
            {'price': '-3.50'},
            {'stock': 'ten'},
            {'stock': '-1'},
            {'stock': '1.5'},
            {'categoryId': 'x'},
        ]
        for overrides in invalid:
            data = TestDataFactory.product_payload(self.category, **overrides)
            response = self.client.post(PRODUCTS_URL, data, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, overrides)
        self.assertEqual(Product.objects.count(), 0)

    def test_list_products_with_category_name(self):
        other = TestDataFactory.create_category(name='Vitamins')
        TestDataFactory.create_product(name='Vitamin C', category=other)
        TestDataFactory.create_product(name='Aspirin', category=self.category)
        response = self.client.get(PRODUCTS_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual([p['name'] for p in body], ['Aspirin', 'Vitamin C'])
        self.assertEqual([p['category']['name'] for p in body], ['Analgesics', 'Vitamins'])

    def test_get_invalid_id(self):
        response = self.client.get(product_url('abc'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_not_found(self):
        response = self.client.get(product_url(9999))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json(), {'message': 'Product not found.'})

    def test_update_product(self):
        product = TestDataFactory.create_product(name='Aspirin', category=self.category)
        other = TestDataFactory.create_category(name='Cough and Cold')
        data = {
            'name': 'Aspirin 500mg',
            'description': 'Tablets',
            'price': '4.25',
            'stock': 30,
            'categoryId': other.id,
        }
        response = self.client.put(product_url(product.id), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['category']['name'], 'Cough and Cold')
        product.refresh_from_db()
        self.assertEqual(product.name, 'Aspirin 500mg')
        self.assertEqual(product.price, Decimal('4.25'))
        self.assertEqual(product.stock, 30)
        self.assertEqual(product.category_id, other.id)

    def test_update_without_description_keeps_it(self):
        product = TestDataFactory.create_product(
            name='Paracetamol', category=self.category, description='Tablets 500mg',
        )
        data = TestDataFactory.product_payload(self.category, name='Paracetamol 500mg', stock=25)
        del data['description']
        response = self.client.put(product_url(product.id), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['description'], 'Tablets 500mg')
        product.refresh_from_db()
        self.assertEqual(product.description, 'Tablets 500mg')
        self.assertEqual(product.name, 'Paracetamol 500mg')
        self.assertEqual(product.stock, 25)

    def test_update_null_description_clears_it(self):
        product = TestDataFactory.create_product(category=self.category, description='Syrup')
        data = TestDataFactory.product_payload(self.category, description=None)
        response = self.client.put(product_url(product.id), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.description, '')

    def test_create_without_description(self):
        data = TestDataFactory.product_payload(self.category)
        del data['description']
        response = self.client.post(PRODUCTS_URL, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Product.objects.get(pk=response.json()['id']).description, '')

    def test_update_non_numeric_price_leaves_product_unchanged(self):
        product = TestDataFactory.create_product(name='Aspirin', category=self.category, price=Decimal('9.99'))
        data = TestDataFactory.product_payload(self.category, name='Changed', price='abc')
        response = self.client.put(product_url(product.id), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        product.refresh_from_db()
        self.assertEqual(product.name, 'Aspirin')
        self.assertEqual(product.price, Decimal('9.99'))

    def test_update_unknown_category(self):
        product = TestDataFactory.create_product(category=self.category)
        data = TestDataFactory.product_payload(self.category, categoryId=9999)
        response = self.client.put(product_url(product.id), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        product.refresh_from_db()
        self.assertEqual(product.category_id, self.category.id)

    def test_update_not_found(self):
        data = TestDataFactory.product_payload(self.category)
        response = self.client.put(product_url(9999), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_then_get(self):
        product = TestDataFactory.create_product(category=self.category)
        response = self.client.delete(product_url(product.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'message': 'Product deleted successfully.'})
        self.assertEqual(self.client.get(product_url(product.id)).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(product_url(product.id)).status_code, status.HTTP_404_NOT_FOUND)

    def test_category_deletable_after_products_removed(self):
        product = TestDataFactory.create_product(category=self.category)
        self.assertEqual(self.client.delete(category_url(self.category.id)).status_code, status.HTTP_409_CONFLICT)
        self.client.delete(product_url(product.id))
        self.assertEqual(self.client.delete(category_url(self.category.id)).status_code, status.HTTP_200_OK)


class CatalogStoreTests(TestCase):
    """Test the persistence gateway directly"""

    def setUp(self):
        self.store = CatalogStore().open()

    def test_get_missing_row(self):
        with self.assertRaises(StoreError) as ctx:
            self.store.categories.get(9999)
        self.assertIs(ctx.exception.kind, StoreErrorKind.NOT_FOUND)

    def test_duplicate_category_name(self):
        self.store.categories.create(name='Analgesics')
        with self.assertRaises(StoreError) as ctx:
            self.store.categories.create(name='Analgesics')
        self.assertIs(ctx.exception.kind, StoreErrorKind.UNIQUE_VIOLATION)

    def test_protected_category_delete(self):
        category = TestDataFactory.create_category()
        TestDataFactory.create_product(category=category)
        with self.assertRaises(StoreError) as ctx:
            self.store.categories.delete(category.id)
        self.assertIs(ctx.exception.kind, StoreErrorKind.FOREIGN_KEY_VIOLATION)

    def test_product_reference_checked(self):
        with self.assertRaises(StoreError) as ctx:
            self.store.products.create(name='Aspirin', price=Decimal('1.00'), stock=1, category_id=9999)
        self.assertIs(ctx.exception.kind, StoreErrorKind.FOREIGN_KEY_VIOLATION)
        self.assertEqual(Product.objects.count(), 0)

    def test_unopened_store_refuses_calls(self):
        store = CatalogStore()
        self.assertFalse(store.is_open)
        with self.assertRaises(StoreError) as ctx:
            store.categories.list()
        self.assertIs(ctx.exception.kind, StoreErrorKind.OTHER)
        # Closing a store that was never opened is a no-op
        store.close()
        self.assertFalse(store.is_open)

    def test_classify_integrity_error_by_sqlstate(self):
        class DriverError(Exception):
            sqlstate = '23505'

        error = IntegrityError('constraint failed')
        error.__cause__ = DriverError()
        self.assertIs(classify_integrity_error(error), StoreErrorKind.UNIQUE_VIOLATION)

    def test_classify_integrity_error_by_message(self):
        self.assertIs(
            classify_integrity_error(IntegrityError('FOREIGN KEY constraint failed')),
            StoreErrorKind.FOREIGN_KEY_VIOLATION,
        )
        self.assertIs(
            classify_integrity_error(IntegrityError('UNIQUE constraint failed: categories.name')),
            StoreErrorKind.UNIQUE_VIOLATION,
        )
        self.assertIs(classify_integrity_error(IntegrityError('NOT NULL constraint failed')), StoreErrorKind.OTHER)
