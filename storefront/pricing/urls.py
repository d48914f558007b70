from django.urls import path
from .views import coupon_list_create, coupon_detail

urlpatterns = [
    # Coupon endpoints
    path('admin/coupons/', coupon_list_create, name='coupon-list-create'),
    path('admin/coupons/<str:pk>/', coupon_detail, name='coupon-detail'),
]
