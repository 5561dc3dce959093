# PATH: /OperativeX/machines/urls.py
from django.urls import path
from . import views

app_name = 'machines'

urlpatterns = [
    path('', views.machine_list_view, name='machine_list'),
    path('edit/<int:pk>/', views.machine_edit_view, name='machine_edit'),
    path('delete/<int:pk>/', views.machine_delete_view, name='machine_delete'),
]
