"""
Celery configuration for the chat backend.

Celery runs realtime fan-out off the request path: views enqueue
``chat.tasks.deliver_chat_event`` and a worker pushes the event into the
Channels layer. The broker is Redis in deployment. When REDIS_URL is not
configured, tasks run eagerly in the calling process, next to the in-memory
channel layer.

Usage:
    from chat.tasks import deliver_chat_event

    deliver_chat_event.delay("message", [2, 3], {"id": 10, ...})

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

# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()
