from django.urls import path
from .views import inventory_list, inventory_adjust, inventory_logs, variant_threshold

urlpatterns = [
    # Inventory endpoints
    path('admin/inventory/', inventory_list, name='inventory-list'),
    path('admin/inventory/adjust/', inventory_adjust, name='inventory-adjust'),
    path('admin/inventory/logs/', inventory_logs, name='inventory-logs'),
    path('admin/inventory/variants/<str:pk>/threshold/', variant_threshold, name='variant-threshold'),
]
