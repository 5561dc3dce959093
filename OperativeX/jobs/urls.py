# PATH: /OperativeX/jobs/urls.py
"""URL configuration for the jobs app.

The JSON submission and printing-board endpoints are mounted at the project
level under ``/api/``; this module only carries the job form page.
"""

from django.urls import path
from . import views


app_name = 'jobs'

urlpatterns = [
    path('new/', views.job_form_view, name='job_form'),
]
