from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'orders'

router = DefaultRouter()
router.register(r'', views.OrderViewSet, basename='order')

urlpatterns = [
    # GET    /api/orders/                 - Active orders (?status=)
    # POST   /api/orders/                 - Create order
    # GET    /api/orders/{id}/            - Get order
    # DELETE /api/orders/{id}/            - Purge archived order
    # POST   /api/orders/{id}/advance/    - Next status
    # POST   /api/orders/{id}/cancel/     - Cancel (confirm=true)
    # GET    /api/orders/archive/         - Delivered + deleted
    # POST   /api/orders/quote/           - Price line items
    path('', include(router.urls)),
]
