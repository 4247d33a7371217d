from decimal import Decimal, ROUND_HALF_UP

from rest_framework import serializers

from backend.core.serializers import StrictCharField
from backend.core.utils import MAX_ID
from .models import Category, Product

CENT = Decimal('0.01')
# Product.price is DecimalField(max_digits=10, decimal_places=2)
MAX_PRICE = Decimal('100000000')


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'created_at', 'updated_at']


class CategorySummarySerializer(serializers.ModelSerializer):
    """Category as embedded in a product"""
    class Meta:
        model = Category
        fields = ['id', 'name']


class ProductSerializer(serializers.ModelSerializer):
    categoryId = serializers.IntegerField(source='category_id', read_only=True)
    category = CategorySummarySerializer(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'description', 'price', 'stock', 'categoryId', 'category', 'created_at', 'updated_at']
        extra_kwargs = {
            'price': {'coerce_to_string': False},
        }


class CategoryProductSerializer(serializers.ModelSerializer):
    """Product as listed under its category (no nested category)"""
    categoryId = serializers.IntegerField(source='category_id', read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'description', 'price', 'stock', 'categoryId', 'created_at', 'updated_at']
        extra_kwargs = {
            'price': {'coerce_to_string': False},
        }


class CategoryDetailSerializer(CategorySerializer):
    products = CategoryProductSerializer(many=True, read_only=True)

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ['products']


class CategoryInputSerializer(serializers.Serializer):
    """Body of POST/PUT /categories"""
    name = StrictCharField(max_length=100)


class ProductInputSerializer(serializers.Serializer):
    """Body of POST/PUT /products"""
    name = StrictCharField(max_length=200)
    # Left out of an update, the stored description is kept
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(max_digits=None, decimal_places=None)
    stock = serializers.IntegerField(min_value=0, max_value=2147483647)
    categoryId = serializers.IntegerField(source='category_id', min_value=1, max_value=MAX_ID)

    def validate_description(self, value):
        return value or ''

    def validate_price(self, value):
        """Round to cents, then require a positive amount that fits the price column"""
        if abs(value) < MAX_PRICE:
            value = value.quantize(CENT, rounding=ROUND_HALF_UP)
        if value >= MAX_PRICE:
            raise serializers.ValidationError('Ensure that there are no more than 8 digits before the decimal point.')
        if value <= Decimal('0'):
            raise serializers.ValidationError('Must be greater than zero.')
        return value
