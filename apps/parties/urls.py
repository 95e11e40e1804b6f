from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PartyViewSet

app_name = 'parties'

router = DefaultRouter()
router.register(r'', PartyViewSet, basename='party')

urlpatterns = [
    path('', include(router.urls)),
]
