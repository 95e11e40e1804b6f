from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'roles'

router = DefaultRouter()
router.register(r'', views.RoleViewSet, basename='role')

urlpatterns = [
    # GET    /api/roles/              - List roles
    # POST   /api/roles/              - Create custom role
    # GET    /api/roles/{id}/         - Role details
    # PUT    /api/roles/{id}/         - Update role
    # PATCH  /api/roles/{id}/         - Partial update
    # DELETE /api/roles/{id}/         - Delete custom role
    # GET    /api/roles/permissions/  - Permission catalog
    path('', include(router.urls)),
]
