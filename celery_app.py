"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory so the quota services are initialized in the
dependency container before any task runs.
"""

from app_factory import create_app

flask_app = create_app()

celery_app = flask_app.celery

# Task modules import celery_app for their decorators, so they are listed
# by name and imported by the worker after this module has loaded.
celery_app.conf.imports = ("tasks.prune_task",)
