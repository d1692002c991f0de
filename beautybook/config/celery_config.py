"""Celery application factory"""
from celery import Celery

from beautybook.config.settings import get_settings


def create_celery_app() -> Celery:
    """Create and configure the Celery app used by the API and the worker"""
    settings = get_settings()

    app = Celery(
        "beautybook",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["beautybook.tasks.notification_tasks"],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_acks_late=True,
        task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
        task_eager_propagates=False,
        task_routes={
            "beautybook.tasks.notification_tasks.*": {"queue": "notifications"},
        },
    )

    return app


celery_app = create_celery_app()
