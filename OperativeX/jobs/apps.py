# PATH: /OperativeX/jobs/apps.py
from django.apps import AppConfig


class JobsConfig(AppConfig):
    """Configuration for the jobs app.

    Job cards, their sub-jobs and the per-process work items, together with
    the submission service and the change feed.  The change feed receivers
    live in ``jobs.models`` and are registered when the models load.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'jobs'
