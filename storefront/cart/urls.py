from django.urls import path
from .views import (
    cart_detail, cart_items, cart_item_detail,
    wishlist_list_create, wishlist_item,
    checkout,
)

urlpatterns = [
    # Cart endpoints
    path('cart/', cart_detail, name='cart-detail'),
    path('cart/items/', cart_items, name='cart-items'),
    path('cart/items/<str:product_id>/', cart_item_detail, name='cart-item-detail'),

    # Wishlist endpoints
    path('wishlist/', wishlist_list_create, name='wishlist-list-create'),
    path('wishlist/<str:product_id>/', wishlist_item, name='wishlist-item'),

    # Checkout
    path('checkout/', checkout, name='checkout'),
]
