# resort/celery.py
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "resort.settings")

app = Celery("resort")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
