# PATH: /OperativeX/users/signals.py
import logging

from django.contrib.auth import logout
from django.contrib.auth.signals import user_logged_in
from django.db import DatabaseError
from django.dispatch import receiver

from .services import ensure_profile

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def provision_profile_on_login(sender, request, user, **kwargs):
    """Create the default worker profile on first sign-in; sign out if that fails."""
    try:
        ensure_profile(user)
    except DatabaseError:
        logger.exception("Could not provision a profile for %s", user.get_username())
        if request is not None:
            logout(request)
