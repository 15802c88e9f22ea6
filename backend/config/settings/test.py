"""
Test settings for the quality catalog project.
"""

import tempfile

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

MEDIA_ROOT = Path(tempfile.mkdtemp(prefix='quality-media-'))

# =============================================================================
# CELERY - Tests (Eager, in-memory broker)
# =============================================================================
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# =============================================================================
# LOGGING - Tests (let pytest capture engine records)
# =============================================================================
for logger_name in ENGINE_LOGGERS:
    LOGGING['loggers'][logger_name]['propagate'] = True
    LOGGING['loggers'][logger_name]['handlers'] = []
