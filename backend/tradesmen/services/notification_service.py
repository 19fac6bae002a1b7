"""
Best-effort notification channel.

Routes submit notifications here instead of calling EmailService directly.
Submissions run as FastAPI background tasks after the response has been
sent, so the HTTP result never depends on email delivery. Failures are
logged and dropped: there is no delivery guarantee.
"""
from datetime import date, time
from typing import Callable, Optional

from fastapi import BackgroundTasks

from tradesmen.lib.logging import correlation_id_var, get_correlation_id, get_logger
from tradesmen.services.email_service import EmailService

logger = get_logger(__name__)


class NotificationChannel:
    """
    Fire-and-forget wrapper around an optional EmailService.
    """

    def __init__(self, email_service: Optional[EmailService]):
        self.email_service = email_service

    @property
    def enabled(self) -> bool:
        return self.email_service is not None

    def submit(
        self,
        background_tasks: BackgroundTasks,
        description: str,
        send: Callable[[EmailService], None],
    ) -> bool:
        """
        Schedule ``send(email_service)`` to run after the response.

        Returns:
            True if the notification was scheduled, False if email is disabled
        """
        if not self.enabled:
            logger.info(
                "Email service not configured, notification dropped",
                extra={"notification": description},
            )
            return False

        # The request context is gone by the time the task runs
        background_tasks.add_task(self._run, description, send, get_correlation_id())
        return True

    def _run(
        self,
        description: str,
        send: Callable[[EmailService], None],
        correlation_id: Optional[str] = None,
    ) -> None:
        extra = {"notification": description, "correlation_id": correlation_id}
        # Email retry logs also pick the id up from the context var
        token = correlation_id_var.set(correlation_id)
        try:
            send(self.email_service)
        except Exception as e:
            # Nothing upstream is waiting on this result
            logger.error(f"Failed to send {description}: {e}", extra=extra, exc_info=True)
            return
        finally:
            correlation_id_var.reset(token)
        logger.info(f"Sent {description}", extra=extra)

    def notify_contact(
        self,
        background_tasks: BackgroundTasks,
        name: str,
        email: str,
        subject: Optional[str],
        message: str,
    ) -> bool:
        return self.submit(
            background_tasks,
            "contact notification",
            lambda service: service.send_contact_notification(name, email, subject, message),
        )

    def notify_booking(
        self,
        background_tasks: BackgroundTasks,
        booking_id: int,
        customer_name: str,
        customer_email: str,
        service_type: str,
        scheduled_date: Optional[date] = None,
        scheduled_time: Optional[time] = None,
    ) -> bool:
        return self.submit(
            background_tasks,
            f"booking notification for booking {booking_id}",
            lambda service: service.send_booking_notification(
                booking_id,
                customer_name,
                customer_email,
                service_type,
                scheduled_date,
                scheduled_time,
            ),
        )
