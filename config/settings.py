"""
Django settings for the admin task harness.

Tasks run outside of a request cycle, so this settings module only carries
what they need: the database, the domain apps, logging and Celery.
"""
import os
from pathlib import Path

from config.database import get_database_config

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'insecure-dev-key-change-me')
DEBUG = os.getenv('DEBUG', 'false').lower() == 'true'
ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'apps.core',
    'apps.governance',
    'apps.identity',
]

DATABASES = {
    'default': get_database_config(BASE_DIR),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = os.getenv('TIME_ZONE', 'UTC')

# =============================================================================
# Task harness
# =============================================================================

# Connection alias opened for each task invocation.
TASK_DATABASE_ALIAS = os.getenv('TASK_DATABASE_ALIAS', 'default')

# Async callable returning a fresh apps.core.container.Container.
TASK_CONTAINER_FACTORY = os.getenv(
    'TASK_CONTAINER_FACTORY', 'apps.core.container.build_container'
)

# Audit logs older than this are removed by the scheduled purge.
AUDIT_LOG_RETENTION_DAYS = int(os.getenv('AUDIT_LOG_RETENTION_DAYS', '365'))

# =============================================================================
# Celery
# =============================================================================

CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_ALWAYS_EAGER = os.getenv('CELERY_TASK_ALWAYS_EAGER', 'false').lower() == 'true'

# =============================================================================
# Logging
# =============================================================================
# Diagnostics for operators go to stderr through the task runner; log output
# stays quiet by default so a successful run prints only its result line.

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
    },
}
