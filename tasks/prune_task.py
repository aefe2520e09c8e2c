"""
Prune Task

Celery beat task that removes activity older than the retention period
so the activity store does not grow without bound.
"""

import logging

from flask import current_app

from application.quota_service import QuotaService
from celery_app import celery_app
from domain.errors import QuotaUnavailableError

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="tasks.prune_activity")
def prune_activity(self):
    """
    Periodic task that prunes the activity store.

    Returns:
        dict: Number of removed entries and any error message
    """
    return run_prune(current_app.container.resolve(QuotaService))


def run_prune(quota_service: QuotaService) -> dict:
    """
    Prune activity through the quota service.

    Args:
        quota_service: Service owning the activity store and retention

    Returns:
        dict with ``removed`` and ``errors``
    """
    logger.info("Starting activity prune")
    try:
        removed = quota_service.prune_activity()
    except QuotaUnavailableError as e:
        logger.error(f"Activity prune failed: {e}")
        return {"removed": 0, "errors": [str(e)]}

    logger.info(f"Activity prune completed - removed {removed} entries")
    return {"removed": removed, "errors": []}
