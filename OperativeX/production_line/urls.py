# PATH: /OperativeX/production_line/urls.py
from django.urls import path
from . import views

app_name = 'production_line'

urlpatterns = [
    path('<str:stage>/', views.stage_view, name='stage'),
    path('<str:stage>/api/items/', views.items_api, name='items_api'),
    path('<str:stage>/api/complete/', views.complete_api, name='complete_api'),
    path('<str:stage>/api/changes/', views.changes_api, name='changes_api'),
]
