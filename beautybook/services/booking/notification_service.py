# beautybook/services/booking/notification_service.py
import logging

from beautybook.models.booking import Booking

logger = logging.getLogger(__name__)


class NotificationService:
    """Queues customer notifications for booking status changes"""

    @staticmethod
    def build_payload(booking: Booking) -> dict:
        return {
            "email": booking.user.email,
            "status": booking.status.value,
            "business_name": booking.business.name,
            "service_name": booking.service.name,
            "appointment_date": booking.start_time.strftime("%A, %B %d, %Y"),
            "appointment_time": booking.start_time.strftime("%I:%M %p"),
            "customer_name": booking.user.full_name,
            "booking_id": str(booking.id),
        }

    @staticmethod
    def booking_status_changed(booking: Booking) -> None:
        """Fire-and-forget: the status change is already committed"""
        from beautybook.tasks.notification_tasks import send_booking_status_email

        try:
            send_booking_status_email.delay(**NotificationService.build_payload(booking))
        except Exception as e:
            logger.error(f"Could not queue {booking.status.value} notification for booking {booking.id}: {e}")
