from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me, change_password,
    user_list_create, user_detail,
    role_list_create, role_detail, permission_list,
    shop_settings, audit_log_list
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/change-password/', change_password, name='change-password'),

    # User and role endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),
    path('roles/', role_list_create, name='role-list-create'),
    path('roles/<int:pk>/', role_detail, name='role-detail'),
    path('permissions/', permission_list, name='permission-list'),

    path('settings/', shop_settings, name='shop-settings'),
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]
