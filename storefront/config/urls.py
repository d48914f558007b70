"""
URL configuration for the storefront project.

Every app mounts its routes under ``api/v1/``; storefront pages and the
admin console share the same prefix (admin routes start with ``admin/``).
"""
from django.urls import path, include

urlpatterns = [
    path('api/v1/', include('storefront.core.urls')),
    path('api/v1/', include('storefront.locations.urls')),
    path('api/v1/', include('storefront.catalog.urls')),
    path('api/v1/', include('storefront.inventory.urls')),
    path('api/v1/', include('storefront.parties.urls')),
    path('api/v1/', include('storefront.pricing.urls')),
    path('api/v1/', include('storefront.cart.urls')),
    path('api/v1/', include('storefront.orders.urls')),
    path('api/v1/', include('storefront.content.urls')),
    path('api/v1/', include('storefront.reports.urls')),
]
