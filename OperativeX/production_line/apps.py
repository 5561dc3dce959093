# PATH: /OperativeX/production_line/apps.py
from django.apps import AppConfig


class ProductionLineConfig(AppConfig):
    """Stage pages where floor workers complete their process steps."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'production_line'
