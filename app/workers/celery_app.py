"""
Celery application for background jobs.

Usage:
    # Start worker
    celery -A app.workers.celery_app worker -Q teams,default --loglevel=info
"""

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun

from app.core.config import settings
from app.shared.logging import configure_logging

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


def create_celery_app() -> Celery:
    """Create and configure the Celery application.

    Returns:
        Configured Celery app instance.
    """
    app = Celery(
        "transfer_market_worker",
        include=["app.workers.tasks"],
    )
    app.config_from_object("app.workers.config:CeleryConfig")

    broker = settings.redis_url.split("@")[-1]
    logger.info("Celery app created with broker: %s", broker)
    return app


celery_app = create_celery_app()


# ------------------------------------------------------------------
# Signals
# ------------------------------------------------------------------


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, **extra):
    """Log when a task starts."""
    logger.info("Task started: %s [%s]", task.name, task_id)


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, state=None, **extra):
    """Log when a task completes."""
    logger.info("Task completed: %s [%s] - State: %s", task.name, task_id, state)


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, **extra):
    """Log when a task fails."""
    logger.error("Task failed: %s [%s] - Error: %s", sender.name, task_id, exception)
