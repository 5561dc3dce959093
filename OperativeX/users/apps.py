# PATH: /OperativeX/users/apps.py
from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Auth identities and the worker profiles attached to them.

    ``ready`` wires the login signal that provisions a profile the first
    time an identity signs in.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'users'

    def ready(self):
        from . import signals  # noqa: F401
