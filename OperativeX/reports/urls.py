# PATH: /OperativeX/reports/urls.py

from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('', views.reports_view, name='reports'),
    path('status/', views.job_status_view, name='job_status'),
    path('export/xlsx/', views.reports_export_xlsx, name='export_xlsx'),
    path('export/pdf/', views.reports_export_pdf, name='export_pdf'),
    # Live change feed polled by the report pages
    path('api/changes/', views.changes_api, name='changes_api'),
    path('api/records/<int:record_id>/undo/', views.record_undo_api, name='record_undo'),
    path('api/records/<int:record_id>/complete/', views.record_complete_api, name='record_complete'),
]
