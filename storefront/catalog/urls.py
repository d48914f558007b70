from django.urls import path
from .views import (
    category_tree, category_list, category_detail,
    shop, product_detail, search, product_reviews,
    collection_list, collection_detail,
    admin_product_list_create, admin_product_detail, admin_product_status,
    admin_product_bulk_delete, admin_product_stats,
    admin_category_tree, admin_category_create, admin_category_detail,
    admin_category_draft, admin_category_draft_save, admin_category_reorder,
    admin_collection_list_create, admin_collection_detail, admin_collection_products,
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list, name='category-list'),
    path('categories/tree/', category_tree, name='category-tree'),
    path('categories/<slug:slug>/', category_detail, name='category-detail'),

    # Shop & product endpoints
    path('shop/', shop, name='shop'),
    path('search/', search, name='search'),
    path('products/<str:pk>/', product_detail, name='product-detail'),
    path('products/<str:pk>/reviews/', product_reviews, name='product-reviews'),

    # Collection endpoints
    path('collections/', collection_list, name='collection-list'),
    path('collections/<str:pk>/', collection_detail, name='collection-detail'),

    # Admin product endpoints
    path('admin/products/', admin_product_list_create, name='admin-product-list-create'),
    path('admin/products/stats/', admin_product_stats, name='admin-product-stats'),
    path('admin/products/bulk-delete/', admin_product_bulk_delete, name='admin-product-bulk-delete'),
    path('admin/products/<str:pk>/', admin_product_detail, name='admin-product-detail'),
    path('admin/products/<str:pk>/status/', admin_product_status, name='admin-product-status'),

    # Admin category endpoints
    path('admin/categories/', admin_category_create, name='admin-category-create'),
    path('admin/categories/tree/', admin_category_tree, name='admin-category-tree'),
    path('admin/categories/draft/', admin_category_draft, name='admin-category-draft'),
    path('admin/categories/draft/save/', admin_category_draft_save, name='admin-category-draft-save'),
    path('admin/categories/reorder/', admin_category_reorder, name='admin-category-reorder'),
    path('admin/categories/<str:pk>/', admin_category_detail, name='admin-category-detail'),

    # Admin collection endpoints
    path('admin/collections/', admin_collection_list_create, name='admin-collection-list-create'),
    path('admin/collections/<str:pk>/', admin_collection_detail, name='admin-collection-detail'),
    path('admin/collections/<str:pk>/products/', admin_collection_products, name='admin-collection-products'),
]
