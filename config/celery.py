import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("tourbook")

# Beat schedule comes from CELERY_BEAT_SCHEDULE in settings
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
