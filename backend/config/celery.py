"""
Celery configuration for the quality catalog project.
"""

import os

from celery import Celery

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('quality')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Tasks live in the application layer, not in Django apps.
app.autodiscover_tasks(['application'])

# Configure task routes
app.conf.task_routes = {
    'application.tasks.stock_tasks.*': {'queue': 'rollups'},
    'application.tasks.bom_tasks.*': {'queue': 'exports'},
}


@app.task(bind=True, ignore_result=True)
def debug_task(self):
    print(f'Request: {self.request!r}')
