# PATH: /OperativeX/OperativeX/context_processors.py
from django.conf import settings

from .navigation import is_admin, nav_pages


def profile_context(request):
    profile = getattr(request, 'profile', None)
    if profile is None:
        return {}
    return {
        'profile': profile,
        'full_name': profile.full_name or profile.employee_code,
        'employee_code': profile.employee_code,
        'is_admin': is_admin(profile),
    }


def navigation_context(request):
    profile = getattr(request, 'profile', None)
    if profile is None:
        return {}
    pages = nav_pages(profile)
    return {
        'nav_main': pages['main'],
        'nav_additional': pages['additional'],
        'change_poll_ms': settings.OPERATIVEX_CHANGE_POLL_MS,
    }
