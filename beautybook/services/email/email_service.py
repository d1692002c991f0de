# beautybook/services/email/email_service.py
import smtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import logging

from beautybook.config.settings import settings

logger = logging.getLogger(__name__)

STATUS_SUBJECTS = {
    "CONFIRMED": "Your booking is confirmed",
    "CANCELLED": "Your booking has been cancelled",
    "COMPLETED": "Thanks for visiting",
}

STATUS_LINES = {
    "CONFIRMED": "Your appointment is confirmed. We look forward to seeing you!",
    "CANCELLED": "Your appointment has been cancelled.",
    "COMPLETED": "Your appointment is complete. We'd love to hear how it went.",
}


def render_status_html(
        display_name: str,
        headline: str,
        business_name: str,
        service_name: str,
        appointment_date: str,
        appointment_time: str,
        booking_url: str
) -> str:
    """HTML body for a status email; customer and business supplied text is escaped"""
    return f"""
        <!DOCTYPE html>
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h2 style="margin-top: 0;">Hi {escape(display_name)}!</h2>
            <p style="font-size: 16px;">{escape(headline)}</p>
            <table style="font-size: 15px; color: #555;">
                <tr><td><strong>Service</strong></td><td>{escape(service_name)}</td></tr>
                <tr><td><strong>Where</strong></td><td>{escape(business_name)}</td></tr>
                <tr><td><strong>When</strong></td><td>{escape(appointment_date)} at {escape(appointment_time)}</td></tr>
            </table>
            <p><a href="{escape(booking_url)}">View your booking</a></p>
        </body>
        </html>
        """


class EmailService:
    """Service for sending emails via SMTP"""

    @staticmethod
    def _get_smtp_connection():
        """Create and return SMTP connection"""
        try:
            if settings.EMAIL_USE_TLS:
                server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT)
                server.starttls()
            else:
                server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT)

            if settings.EMAIL_USERNAME and settings.EMAIL_PASSWORD:
                server.login(settings.EMAIL_USERNAME, settings.EMAIL_PASSWORD)

            return server
        except Exception as e:
            logger.error(f"Failed to connect to SMTP server: {e}")
            raise

    @staticmethod
    def send_email(to_email: str, subject: str, html_content: str, plain_text: Optional[str] = None) -> bool:
        """
        Send an email using SMTP

        Returns:
            bool: True if sent, False when email delivery is disabled
        """
        if not settings.EMAIL_ENABLED:
            logger.info(f"Email disabled, skipping '{subject}' to {to_email}")
            return False

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
        msg['To'] = to_email

        if plain_text:
            msg.attach(MIMEText(plain_text, 'plain'))
        msg.attach(MIMEText(html_content, 'html'))

        server = EmailService._get_smtp_connection()
        try:
            server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], msg.as_string())
        finally:
            server.quit()

        logger.info(f"Email sent successfully to {to_email}")
        return True

    @staticmethod
    def send_booking_status_email(
            email: str,
            status: str,
            business_name: str,
            service_name: str,
            appointment_date: str,
            appointment_time: str,
            customer_name: Optional[str] = None,
            booking_id: Optional[str] = None
    ) -> bool:
        """Tell the customer their booking changed status"""
        subject = f"{STATUS_SUBJECTS.get(status, 'Booking update')} - {business_name}"
        headline = STATUS_LINES.get(status, f"Your booking is now {status.lower()}.")
        display_name = customer_name or "there"
        booking_url = f"{settings.FRONTEND_URL}/bookings/{booking_id}" if booking_id else settings.FRONTEND_URL

        plain_text = (
            f"Hi {display_name},\n\n"
            f"{headline}\n\n"
            f"{service_name} at {business_name}\n"
            f"{appointment_date} at {appointment_time}\n\n"
            f"Manage your booking: {booking_url}\n"
        )

        html_content = render_status_html(
            display_name, headline, business_name, service_name, appointment_date, appointment_time, booking_url
        )

        return EmailService.send_email(email, subject, html_content, plain_text)
