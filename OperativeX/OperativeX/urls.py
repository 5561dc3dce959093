# PATH: /OperativeX/OperativeX/urls.py
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView
from django.conf import settings

from .views import home_view
from jobs.views import submit_job_api, printing_jobs_api
from users.views import RememberLoginView, workers_api

urlpatterns = [
    path('admin/', admin.site.urls),
    path('favicon.ico', RedirectView.as_view(url=settings.STATIC_URL + 'favicon.ico', permanent=False)),

    # Auth (login only; logout is handled in users.urls via a custom view)
    path('users/login/', RememberLoginView.as_view(), name='login'),

    path('', home_view, name='home'),
    path('home/', RedirectView.as_view(pattern_name='home', permanent=False)),

    # JSON route handlers
    path('api/submit-job', submit_job_api, name='api_submit_job'),
    path('api/printing-jobs', printing_jobs_api, name='api_printing_jobs'),
    path('api/workers', workers_api, name='api_workers'),

    # Apps
    path('jobs/', include('jobs.urls')),
    path('machines/', include('machines.urls')),
    path('production_line/', include('production_line.urls')),
    path('reports/', include('reports.urls')),
    path('users/', include(('users.urls', 'users'), namespace='users')),

    # PWA endpoints (manifest, service worker); keep at the end
    path('', include('pwa.urls')),
]

if settings.DEBUG:
    from django.conf.urls.static import static
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
