from django.urls import path
from .views import shipping_zone_list_create, shipping_zone_detail

urlpatterns = [
    # Shipping zone endpoints
    path('admin/shipping-zones/', shipping_zone_list_create, name='shipping-zone-list-create'),
    path('admin/shipping-zones/<int:pk>/', shipping_zone_detail, name='shipping-zone-detail'),
]
