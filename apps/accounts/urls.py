from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # Current user
    path('user/', views.get_current_user, name='current-user'),
    path('user/update/', views.update_profile, name='update-profile'),
    path('user/password/', views.update_password, name='change-password'),

    # Availability checks
    path('check-username/', views.check_username, name='check-username'),
    path('check-email/', views.check_email, name='check-email'),
    path('check-mobile/', views.check_mobile, name='check-mobile'),

    # User administration
    path('users/', views.user_list, name='user-list'),
    path('users/<uuid:pk>/', views.user_detail, name='user-detail'),

    # Password setup for admin-created accounts
    path('verify-user/', views.verify_user, name='verify-user'),
    path('setup-password/', views.setup_password_view, name='setup-password'),
]
