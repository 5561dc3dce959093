# PATH: /OperativeX/users/urls.py
from django.urls import path
from .views import logout_view, admin_dashboard_view

app_name = 'users'

urlpatterns = [
    # Logout handled here (accepts POST and GET; redirects to 'login')
    path('logout/', logout_view, name='logout'),
    path('admin/dashboard/', admin_dashboard_view, name='admin_dashboard'),
]
