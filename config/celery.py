import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("gmop")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # No-op unless BOOKING_REQUEST_EXPIRY_HOURS is set
    "expire-stale-booking-requests": {
        "task": "bookings.expire_stale_requests",
        "schedule": crontab(minute=5),
    },
}
