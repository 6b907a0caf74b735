# booking_api/config/celery_config.py
"""Celery application setup"""
from celery import Celery

from booking_api.config.settings import get_settings


def create_celery_app() -> Celery:
    """Create and configure the Celery app"""
    settings = get_settings()

    app = Celery(
        "booking_api",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["booking_api.tasks.notification_tasks"],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        # Publishing happens inside request handlers; never block them for long
        broker_connection_timeout=2,
        task_publish_retry_policy={
            "max_retries": 2,
            "interval_start": 0,
            "interval_step": 0.5,
            "interval_max": 1,
        },
        task_routes={
            "booking_api.tasks.notification_tasks.*": {"queue": "notifications"},
        },
    )

    return app


celery_app = create_celery_app()
