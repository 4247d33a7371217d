from django.apps import apps
from django.urls import re_path

from backend.core.views import ResourceDetailView, ResourceListView
from .handlers import category_handler, product_handler

# Store opened by CatalogConfig.ready()
store = apps.get_app_config('catalog').store
categories = category_handler(store)
products = product_handler(store)

urlpatterns = [
    # Category endpoints
    re_path(r'^categories/?$', ResourceListView.as_view(handler=categories), name='category-list-create'),
    re_path(r'^categories/(?P<pk>[^/]+)/?$', ResourceDetailView.as_view(handler=categories), name='category-detail'),

    # Product endpoints
    re_path(r'^products/?$', ResourceListView.as_view(handler=products), name='product-list-create'),
    re_path(r'^products/(?P<pk>[^/]+)/?$', ResourceDetailView.as_view(handler=products), name='product-detail'),
]
