from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

router = DefaultRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/expenses/              - List costs (?start_date=&end_date=)
    # POST   /api/expenses/              - Record cost
    # GET    /api/expenses/{id}/         - Get cost
    # PATCH  /api/expenses/{id}/         - Update cost
    # DELETE /api/expenses/{id}/         - Delete cost
    # GET    /api/expenses/identity/     - Device identity
    path('', include(router.urls)),
]
