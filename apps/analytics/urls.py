from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Chart series (?period=&date=)
    path('buckets/', views.chart, name='buckets'),

    # Daily summary
    path('today/', views.today, name='today'),

    # Archived orders and costs in a range (?start_date=&end_date=)
    path('audit/', views.audit, name='audit'),
]
