"""Local development settings for GMoP.

Debug on, any host, mail printed to the console and verbose app logs.
Never deploy with these.
"""

from .base import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Run Celery tasks inline unless a worker is explicitly wanted
CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_EAGER', '1') == '1'  # noqa: F405

LOGGING['loggers']['apps']['level'] = 'DEBUG'  # noqa: F405
LOGGING['loggers']['shared']['level'] = 'DEBUG'  # noqa: F405
