# PATH: /OperativeX/OperativeX/asgi.py
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'OperativeX.settings')

application = get_asgi_application()
