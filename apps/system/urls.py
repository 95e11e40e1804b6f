from django.urls import path
from . import views

app_name = 'system'

urlpatterns = [
    # GET   /api/settings/  - Application settings
    # PATCH /api/settings/  - Update settings
    path('', views.system_settings, name='settings'),
]
