"""ASGI entry point for GMoP (uvicorn, daphne).

Deployments set DJANGO_SETTINGS_MODULE=config.settings.prod.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
