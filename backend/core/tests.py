"""
Tests for the shared handler layer, error rendering and management commands
"""
from io import StringIO

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APIRequestFactory

from backend.catalog.models import Category, Product
from backend.catalog.handlers import category_handler, product_handler
from backend.catalog.store import CatalogStore
from backend.core.exceptions import ResourceNotFound, ValidationFailed, error_message
from backend.core.test_utils import TestDataFactory
from backend.core.utils import MAX_ID, parse_pk
from backend.core.views import ResourceDetailView, ResourceListView


class ParsePkTests(SimpleTestCase):

    def test_parses_integer_strings(self):
        self.assertEqual(parse_pk('42'), 42)
        self.assertEqual(parse_pk(7), 7)

    def test_rejects_non_integers(self):
        for raw in ('abc', '1.5', '', None, True):
            with self.assertRaises(ValidationFailed):
                parse_pk(raw)

    def test_out_of_range_is_not_found(self):
        for raw in ('0', '-3', str(MAX_ID + 1)):
            with self.assertRaises(ResourceNotFound):
                parse_pk(raw)


class ErrorMessageTests(SimpleTestCase):

    def test_field_errors(self):
        self.assertEqual(error_message({'name': ['This field is required.']}), 'name: This field is required.')

    def test_non_field_errors(self):
        self.assertEqual(error_message({'non_field_errors': ['Invalid data.']}), 'Invalid data.')

    def test_plain_detail(self):
        self.assertEqual(error_message({'detail': 'Not found.'}), 'Not found.')
        self.assertEqual(error_message(['first', 'second']), 'first')


class ExplodingHandler:
    def list(self):
        raise RuntimeError('boom')


class HandlerErrorTests(TestCase):
    """Store failures must come back as a generic 500 with a message body"""

    def setUp(self):
        self.factory = APIRequestFactory()

    def test_store_failure_is_internal_error(self):
        view = ResourceListView.as_view(handler=category_handler(CatalogStore()))
        with self.assertLogs('backend', level='ERROR'):
            response = view(self.factory.get('/api/v1/categories/'))
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'message': 'Internal server error.'})

    def test_detail_store_failure_is_internal_error(self):
        view = ResourceDetailView.as_view(handler=product_handler(CatalogStore()))
        with self.assertLogs('backend', level='ERROR'):
            response = view(self.factory.get('/api/v1/products/1/'), pk='1')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def test_unexpected_exception_is_internal_error(self):
        view = ResourceListView.as_view(handler=ExplodingHandler())
        with self.assertLogs('backend', level='ERROR'):
            response = view(self.factory.get('/api/v1/categories/'))
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'message': 'Internal server error.'})

    def test_validation_runs_before_store(self):
        # An unopened store would fail with 500, so a 400 proves the store was never called
        view = ResourceListView.as_view(handler=category_handler(CatalogStore()))
        response = view(self.factory.post('/api/v1/categories/', {'name': ''}, format='json'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ManagementCommandTests(TestCase):

    def test_add_categories(self):
        TestDataFactory.create_category(name='Analgesics')
        out = StringIO()
        call_command('add_categories', stdout=out)
        self.assertEqual(Category.objects.filter(name='Analgesics').count(), 1)
        self.assertTrue(Category.objects.filter(name='Antibiotics').exists())
        self.assertIn('Skipped (already exists): Analgesics', out.getvalue())

    def test_add_categories_clear(self):
        TestDataFactory.create_product(category=TestDataFactory.create_category(name='Old'))
        call_command('add_categories', '--clear', stdout=StringIO())
        self.assertFalse(Category.objects.filter(name='Old').exists())
        self.assertEqual(Product.objects.count(), 0)

    def test_clear_data(self):
        TestDataFactory.create_product()
        call_command('clear_data', '--confirm', stdout=StringIO())
        self.assertEqual(Product.objects.count(), 0)
        self.assertEqual(Category.objects.count(), 0)
