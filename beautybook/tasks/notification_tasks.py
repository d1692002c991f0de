# ===== beautybook/tasks/notification_tasks.py =====
from typing import Optional
import logging

from beautybook.config.celery_config import celery_app
from beautybook.services.email.email_service import EmailService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_booking_status_email(
        self,
        email: str,
        status: str,
        business_name: str,
        service_name: str,
        appointment_date: str,
        appointment_time: str,
        customer_name: Optional[str] = None,
        booking_id: Optional[str] = None
):
    """
    Email the customer after a booking is confirmed, cancelled or completed

    Args:
        email: Customer email address
        status: New booking status
        appointment_date / appointment_time: Business-local, preformatted
    """
    try:
        logger.info(f"Sending {status} notification for booking {booking_id} to {email}")

        sent = EmailService.send_booking_status_email(
            email=email,
            status=status,
            business_name=business_name,
            service_name=service_name,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            customer_name=customer_name,
            booking_id=booking_id,
        )

        return {"status": "success" if sent else "skipped", "email": email}

    except Exception as exc:
        logger.error(f"Failed to send {status} notification to {email}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
