from django.urls import path
from .views import google_login, user_me, logout, upload, system_config

urlpatterns = [
    # Auth endpoints
    path('auth/google/', google_login, name='auth-google'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/logout/', logout, name='auth-logout'),

    # Media
    path('upload/', upload, name='upload'),

    # System enums (order statuses, shipping zones, ...)
    path('config/enums/', system_config, name='system-config'),
]
