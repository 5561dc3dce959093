# PATH: /OperativeX/OperativeX/settings.py
import os
from pathlib import Path
from django.urls import reverse_lazy  # type: ignore

BASE_DIR = Path(__file__).resolve().parent.parent

# NOTE: In production, SECRET_KEY must come from environment.
SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-operativex-key')

# DEBUG defaults to True for dev; set DEBUG=0/false in production.
DEBUG = str(os.environ.get('DEBUG', '1')).lower() in {'1', 'true', 'yes'}

_env_allowed = os.environ.get('ALLOWED_HOSTS')
ALLOWED_HOSTS: list[str] = (
    [h for h in (_env_allowed.split() if _env_allowed else ['*']) if h]
)
# Trust HTTPS scheme from the reverse proxy in front of the plant server
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
CSRF_TRUSTED_ORIGINS = ['https://*.trycloudflare.com']

# If DOMAIN is provided (e.g., operativex.com), trust it for HTTPS.
_domain = os.environ.get('DOMAIN')
if _domain:
    _domain = _domain.replace('http://', '').replace('https://', '').strip('/')
    CSRF_TRUSTED_ORIGINS += [
        f"https://{_domain}",
        f"https://www.{_domain}",
    ]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'pwa',
    'OperativeX',
    'users',
    'machines',
    'jobs',
    'production_line',
    'reports',
    'widget_tweaks',
    'csp',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'OperativeX.middleware.CurrentProfileMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'csp.middleware.CSPMiddleware',
]

# Content Security Policy settings for django-csp >= 4.0
CONTENT_SECURITY_POLICY = {
    "DIRECTIVES": {
        "default-src": ["'self'"],
        # Allow inline/eval in DEBUG for Tailwind CDN convenience (not for strict prod)
        "script-src": ["'self'", "'unsafe-inline'", "'unsafe-eval'", "cdn.tailwindcss.com"],
        "style-src": ["'self'", "'unsafe-inline'"],
        "img-src":    ["'self'", "data:", "blob:"],
        "connect-src": ["'self'"],
        "worker-src": ["'self'"],       # For the service worker
        "manifest-src": ["'self'"],     # For manifest.json
    }
}

ROOT_URLCONF = 'OperativeX.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / "templates"],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'OperativeX.context_processors.profile_context',
                'OperativeX.context_processors.navigation_context',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    }
]

WSGI_APPLICATION = 'OperativeX.wsgi.application'
ASGI_APPLICATION = 'OperativeX.asgi.application'

AUTH_USER_MODEL = 'users.CustomUser'

# Default DB is PostgreSQL; set DB_ENGINE=django.db.backends.sqlite3 for local runs.
_db_engine = os.environ.get('DB_ENGINE', 'django.db.backends.postgresql')
if _db_engine == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.environ.get('DJANGO_DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': _db_engine,
            'NAME': os.environ.get('DB_NAME', 'operativex'),
            'USER': os.environ.get('DB_USER', 'operativex'),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', '127.0.0.1'),
            'PORT': os.environ.get('DB_PORT', '5432'),
        }
    }

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'Asia/Karachi')
USE_I18N = True
USE_TZ = True

# STATIC_URL must be absolute to avoid broken links on nested URLs
STATIC_URL = '/static/'
STATICFILES_DIRS = [
    BASE_DIR / "static",
]
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

SESSION_EXPIRE_AT_BROWSER_CLOSE = False
SESSION_COOKIE_AGE = 60 * 60 * 24 * 14  # 14 days

PWA_APP_NAME = 'OperativeX'
PWA_APP_DESCRIPTION = "Job card and production process tracking"
PWA_APP_THEME_COLOR = '#7c3aed'
PWA_APP_BACKGROUND_COLOR = "#ede9fe"
PWA_APP_DISPLAY = 'standalone'
PWA_APP_SCOPE = '/'
PWA_APP_ORIENTATION = 'portrait'
PWA_APP_OFFLINE_PAGE = 'offline.html'
PWA_SERVICE_WORKER_PATH = BASE_DIR / "static" / "serviceworker.js"
PWA_APP_START_URL = '/'
PWA_APP_ICONS = [
    {
        'src': '/static/icons/icon-192x192.png',
        'sizes': '192x192',
        'purpose': 'any maskable',
    },
    {
        'src': '/static/icons/icon-512x512.png',
        'sizes': '512x512',
        'purpose': 'any maskable',
    }
]
PWA_APP_LANG = 'en'

LOGIN_URL = reverse_lazy("login")
LOGIN_REDIRECT_URL = reverse_lazy("home")
LOGOUT_REDIRECT_URL = reverse_lazy("login")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'plain',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        app: {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False}
        for app in ('OperativeX', 'users', 'machines', 'jobs', 'production_line', 'reports')
    },
}

# ---------------------------------------------------------------------------
# Plant configuration
# ---------------------------------------------------------------------------
# Fallback machine per process name, used when a sub-job selects a process
# without naming a machine for it.
OPERATIVEX_DEFAULT_MACHINES = {
    'Pre_Press': 1,
    'Printing': 1,
    'Card_Cutting': 1,
    'Varnish: Shine': 1,
    'Lamination: Matte': 1,
    'Joint': 1,
    'Die_Cutting': 1,
    'Foil': 1,
    'Pasting': 1,
    'Screen_Printing': 1,
    'Embose': 1,
    'Double_Tape': 1,
    'Sorting': 1,
}
# How long a completed row keeps its "Updating..." marker on the stage pages.
OPERATIVEX_IN_FLIGHT_SECONDS = 3
# Poll interval for the job process change feed on list pages.
OPERATIVEX_CHANGE_POLL_MS = int(os.environ.get('CHANGE_POLL_MS', '4000'))

# In production, tighten CSP (drop unsafe-eval and external CDNs).
if DEBUG:
    # Use report-only so development isn't blocked by CSP
    CONTENT_SECURITY_POLICY_REPORT_ONLY = CONTENT_SECURITY_POLICY
    CONTENT_SECURITY_POLICY = None
else:
    CONTENT_SECURITY_POLICY = {
        "DIRECTIVES": {
            "default-src": ["'self'"],
            "script-src": ["'self'", "'unsafe-inline'"],
            "style-src": ["'self'", "'unsafe-inline'"],
            "img-src":    ["'self'", "data:"],
            "connect-src": ["'self'"],
            "worker-src": ["'self'"],
            "manifest-src": ["'self'"],
        }
    }

# --- Static files: enable WhiteNoise in production ---
if not DEBUG:
    try:
        idx = MIDDLEWARE.index('django.middleware.security.SecurityMiddleware')
        MIDDLEWARE.insert(idx + 1, 'whitenoise.middleware.WhiteNoiseMiddleware')
    except ValueError:
        MIDDLEWARE.append('whitenoise.middleware.WhiteNoiseMiddleware')
    STORAGES = {
        "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
        "staticfiles": {"BACKEND": "whitenoise.storage.CompressedStaticFilesStorage"},
    }
