"""
Celery tasks for periodic request maintenance.
"""
import logging
from celery import shared_task

from relay.services.sweeper import expire_overdue_requests as sweep_overdue_requests

logger = logging.getLogger(__name__)


@shared_task(name='relay.tasks.expire_overdue_requests', ignore_result=True)
def expire_overdue_requests() -> int:
    """
    Expire overdue pending requests and notify their recipients.

    Scheduled by Celery beat every SWEEP_INTERVAL_SECONDS.
    """
    expired_count = sweep_overdue_requests()
    logger.info(f"Expiry sweep finished, {expired_count} requests expired")
    return expired_count
