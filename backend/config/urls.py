"""
URL configuration for the pharmacy inventory backend.

The REST API lives under /api/v1/; the Django admin provides the browser
list/edit pages for categories and products.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Pharmacy Inventory Admin"
admin.site.site_title = "Pharmacy Inventory Admin Portal"
admin.site.index_title = "Categories and products"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.catalog.urls')),
]
