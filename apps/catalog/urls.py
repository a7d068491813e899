from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ServiceViewSet

app_name = 'catalog'

router = DefaultRouter()
router.register(r'services', ServiceViewSet, basename='service')

urlpatterns = [
    # GET    /api/catalog/services/        - List services
    # POST   /api/catalog/services/        - Create service (optional image)
    # GET    /api/catalog/services/{id}/   - Get service
    # PATCH  /api/catalog/services/{id}/   - Partial update
    # DELETE /api/catalog/services/{id}/   - Delete service
    path('', include(router.urls)),
]
