"""
Celery configuration for the Django application.

Celery runs work that should not block a web request. Here that is the
processing of identity provider webhook events (users.tasks), which keep
user records and presence in sync with the provider.

Redis is both the message broker and the result backend. Tasks are
auto-discovered from the tasks.py module of every installed app.

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
