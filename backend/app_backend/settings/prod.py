"""
Production overrides. Select with DJANGO_SETTINGS_MODULE=app_backend.settings.prod.
"""

from .settings import *  # noqa: F401,F403
import os

DEBUG = False
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(',')

# Only the web client may call the API from a browser
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000").split(',')

DATABASES['default']['ENGINE'] = os.getenv("DB_ENGINE", "django.db.backends.postgresql")  # noqa: F405
DATABASES['default']['CONN_MAX_AGE'] = int(os.getenv("DB_CONN_MAX_AGE", 60))  # noqa: F405

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# Follow-up message retries must go through the broker
CELERY_TASK_ALWAYS_EAGER = False
