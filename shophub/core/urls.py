from django.urls import path
from .views import (
    UserLoginView, AdminLoginView, UserTokenRefreshView,
    health, register, user_me, user_profile, user_password, admin_me,
    user_list_create, user_detail,
    audit_log_list, audit_log_detail,
)

urlpatterns = [
    path('health/', health, name='health'),

    # Shopper auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', UserLoginView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', UserTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/profile/', user_profile, name='user-profile'),
    path('auth/password/', user_password, name='user-password'),

    # Admin auth endpoints
    path('admin/auth/login/', AdminLoginView.as_view(), name='admin-login'),
    path('admin/auth/me/', admin_me, name='admin-me'),

    # Admin user management
    path('admin/users/', user_list_create, name='user-list-create'),
    path('admin/users/<int:pk>/', user_detail, name='user-detail'),

    # AuditLog endpoints
    path('admin/audit-logs/', audit_log_list, name='audit-log-list'),
    path('admin/audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
