from django.urls import path
from .views import customer_list, profile, profile_orders, address_list_create, address_detail

urlpatterns = [
    # Customers
    path('admin/customers/', customer_list, name='customer-list'),

    # Profile
    path('profile/', profile, name='profile'),
    path('profile/orders/', profile_orders, name='profile-orders'),
    path('profile/addresses/', address_list_create, name='address-list-create'),
    path('profile/addresses/<str:pk>/', address_detail, name='address-detail'),
]
