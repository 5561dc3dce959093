# PATH: /OperativeX/OperativeX/middleware.py
import logging

from django.conf import settings
from django.contrib.auth import logout
from django.shortcuts import redirect
from django.urls import reverse

from users.models import Profile

logger = logging.getLogger(__name__)


class CurrentProfileMiddleware:
    """Attach the signed-in identity's profile to ``request.profile``.

    The profile is looked up once per request so views, context processors
    and the navigation guard never query it on their own.  An authenticated
    session whose profile row has disappeared is signed out and sent back to
    the login page.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def _is_exempt(self, path: str) -> bool:
        exempt = (reverse('login'), reverse('users:logout'), '/admin/', settings.STATIC_URL)
        return any(path.startswith(prefix) for prefix in exempt)

    def __call__(self, request):
        request.profile = None
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            request.profile = Profile.objects.filter(user=user).first()
            if request.profile is None and not self._is_exempt(request.path):
                logger.warning("Signing out user %s: no profile row", user.pk)
                logout(request)
                return redirect(settings.LOGIN_URL)
        return self.get_response(request)
