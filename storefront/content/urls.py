from django.urls import path
from .views import content_detail, admin_content_update

urlpatterns = [
    # CMS content
    path('content/<str:key>/', content_detail, name='content-detail'),
    path('admin/content/<str:key>/', admin_content_update, name='admin-content-update'),
]
