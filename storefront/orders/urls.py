from django.urls import path
from .views import (
    order_list, order_detail, order_status, order_payment_status,
    order_verify_payment, order_refund, order_history,
)

urlpatterns = [
    # Order administration
    path('admin/orders/', order_list, name='order-list'),
    path('admin/orders/<str:pk>/', order_detail, name='order-detail'),
    path('admin/orders/<str:pk>/status/', order_status, name='order-status'),
    path('admin/orders/<str:pk>/payment-status/', order_payment_status, name='order-payment-status'),
    path('admin/orders/<str:pk>/verify-payment/', order_verify_payment, name='order-verify-payment'),
    path('admin/orders/<str:pk>/refund/', order_refund, name='order-refund'),
    path('admin/orders/<str:pk>/history/', order_history, name='order-history'),
]
