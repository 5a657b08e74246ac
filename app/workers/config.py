"""
Celery worker configuration.

Applied to the Celery app via ``config_from_object``.
"""

from app.core.config import settings


class CeleryConfig:
    """Celery configuration settings."""

    # Broker / result backend (Redis)
    broker_url = settings.redis_url
    result_backend = settings.redis_url
    result_expires = 3600

    # Acknowledge after the task finished so a crashed worker's job is redelivered.
    # Team creation is idempotent, so redelivery is harmless.
    task_acks_late = True
    worker_prefetch_multiplier = 1
    task_time_limit = 120
    task_soft_time_limit = 90

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    task_default_queue = "default"
    task_routes = {
        "teams.create_team_for_user": {"queue": "teams"},
    }

    # Runs tasks in-process when true; set by the test suite.
    task_always_eager = settings.celery_task_always_eager
    task_eager_propagates = True

    worker_hijack_root_logger = False
