# PATH: /OperativeX/machines/apps.py
from django.apps import AppConfig


class MachinesConfig(AppConfig):
    """Processes catalog and plant machines."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'machines'
