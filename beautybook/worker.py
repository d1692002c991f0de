"""
Celery worker for booking notifications

    celery -A beautybook.worker worker -Q notifications
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from beautybook.config.celery_config import celery_app
from beautybook.utils.my_logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


def registered_booking_tasks():
    return sorted(name for name in celery_app.tasks.keys() if name.startswith("beautybook."))


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    logger.info(f"🚀 Notification worker ready, tasks: {registered_booking_tasks()}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("🛑 Notification worker shutting down...")


if __name__ == "__main__":
    celery_app.start([
        'worker',
        '--loglevel=info',
        '--queues=notifications',
        '--concurrency=2',
        '--max-tasks-per-child=1000'
    ])
