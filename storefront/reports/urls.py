from django.urls import path
from .views import dashboard, stats_section

urlpatterns = [
    # Analytics
    path('admin/stats/dashboard/', dashboard, name='stats-dashboard'),
    path('admin/stats/<str:section>/', stats_section, name='stats-section'),
]
