"""Category and Product handlers wired to a catalog store"""
from backend.core.handlers import ResourceHandler
from .serializers import (
    CategoryDetailSerializer, CategoryInputSerializer, CategorySerializer,
    ProductInputSerializer, ProductSerializer,
)


# Category handler
def category_handler(store):
    """Handler for /categories, backed by the given store"""
    return ResourceHandler(
        'category',
        store.categories,
        input_serializer=CategoryInputSerializer,
        output_serializer=CategorySerializer,
        detail_serializer=CategoryDetailSerializer,
        messages={
            'invalid_id': 'Invalid category id.',
            'not_found': 'Category not found.',
            'duplicate': 'A category with this name already exists.',
            'in_use': 'Cannot delete this category because it has associated products. Delete the products first.',
            'deleted': 'Category deleted successfully.',
        },
    )


# Product handler
def product_handler(store):
    """Handler for /products, backed by the given store"""
    return ResourceHandler(
        'product',
        store.products,
        input_serializer=ProductInputSerializer,
        output_serializer=ProductSerializer,
        messages={
            'invalid_id': 'Invalid product id.',
            'not_found': 'Product not found.',
            'bad_reference': 'The provided categoryId does not exist.',
            'deleted': 'Product deleted successfully.',
        },
    )
