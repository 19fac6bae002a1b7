"""
Outbound email over SMTP.

EmailService builds MIME messages and hands them to an SMTP relay. A send
is attempted up to three times, waiting 100ms before the second attempt and
200ms before the third. There is no jitter and no queue behind this; callers
that must not block or fail go through NotificationChannel instead.
"""
import html
import re
import smtplib
import time
from datetime import date, time as time_of_day
from email.message import EmailMessage as MimeMessage
from email.utils import parseaddr
from typing import Callable, Optional

from pydantic import BaseModel
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tradesmen.lib.logging import get_logger
from tradesmen.lib.settings import Settings

logger = get_logger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 0.1

# Failures worth another attempt: protocol errors and socket/connection errors
TRANSIENT_ERRORS = (smtplib.SMTPException, OSError)

LINE_BREAKS = re.compile(r"[\r\n]+")


class EmailError(Exception):
    """Base class for email failures."""


class EmailConfigError(EmailError):
    """SMTP settings are missing or invalid."""


class EmailMessageError(EmailError):
    """The message could not be built (bad address or content type)."""


class EmailDeliveryError(EmailError):
    """Every delivery attempt failed."""


class EmailMessage(BaseModel):
    """An outbound email."""
    to: str
    subject: str
    body: str
    content_type: str = "text/html"


def _check_address(address: str, field: str) -> str:
    _, addr = parseaddr(address)
    if not addr or "@" not in addr or LINE_BREAKS.search(address):
        raise EmailMessageError(f"Invalid {field} email: {address!r}")
    return address


class EmailService:
    """
    SMTP client wrapper.

    Constructed once at application startup (see ``tradesmen.api.app``) and
    passed to whatever needs it.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        notification_email: str,
        use_tls: bool = True,
        timeout: float = 10.0,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not username or not password:
            raise EmailConfigError("SMTP credentials not configured")

        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.notification_email = notification_email
        self.use_tls = use_tls
        self.timeout = timeout
        self.max_attempts = max_attempts
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["EmailService"]:
        """
        Build the service from settings, or return None when SMTP is not configured.
        """
        try:
            service = cls(
                host=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_username,
                password=settings.smtp_password,
                from_email=settings.from_email,
                notification_email=settings.contact_notification_email,
                use_tls=settings.smtp_use_tls,
                timeout=settings.smtp_timeout_seconds,
            )
        except EmailConfigError as e:
            logger.warning(f"{e} - emails will not be sent")
            return None

        logger.info("Email service initialized", extra={"smtp_host": settings.smtp_host})
        return service

    def build_message(self, message: EmailMessage) -> MimeMessage:
        """Turn an EmailMessage into a MIME message, validating addresses and type."""
        maintype, _, subtype = message.content_type.partition(";")[0].strip().partition("/")
        if maintype != "text" or subtype not in ("plain", "html"):
            raise EmailMessageError(f"Invalid content type: {message.content_type!r}")

        mime = MimeMessage()
        try:
            mime["From"] = _check_address(self.from_email, "from")
            mime["To"] = _check_address(message.to, "to")
            # Header values must be a single line
            mime["Subject"] = LINE_BREAKS.sub(" ", message.subject).strip()
        except ValueError as e:
            raise EmailMessageError(f"Invalid header: {e}") from e
        mime.set_content(message.body, subtype=subtype, charset="utf-8")
        return mime

    def _deliver(self, mime: MimeMessage) -> None:
        """One delivery attempt."""
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            smtp.login(self.username, self.password)
            smtp.send_message(mime)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.error(
            f"Email send failed on attempt {retry_state.attempt_number}: "
            f"{retry_state.outcome.exception()}",
            extra={"next_wait_seconds": retry_state.next_action.sleep},
        )

    def send_email(self, message: EmailMessage) -> None:
        """
        Send an email, retrying transient failures.

        Raises:
            EmailMessageError: the message is malformed (not retried)
            EmailDeliveryError: all attempts failed
        """
        mime = self.build_message(message)

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=BACKOFF_BASE_SECONDS),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        attempt_number = 0
        try:
            for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    self._deliver(mime)
        except TRANSIENT_ERRORS as e:
            logger.error(
                f"Email send failed after {self.max_attempts} attempts: {e}",
                extra={"to": message.to},
            )
            raise EmailDeliveryError(
                f"Failed to send email after {self.max_attempts} attempts: {e}"
            ) from e

        logger.info(
            f"Email sent successfully on attempt {attempt_number}",
            extra={"to": message.to},
        )

    def send_contact_notification(
        self,
        contact_name: str,
        contact_email: str,
        subject: Optional[str],
        message: str,
    ) -> None:
        """Tell the business inbox about a new contact form submission."""
        email_subject = f"Contact Form: {subject}" if subject else "New Contact Form Submission"
        body = CONTACT_TEMPLATE.format(
            name=html.escape(contact_name),
            email=html.escape(contact_email, quote=True),
            message=html.escape(message),
        )
        self.send_email(EmailMessage(to=self.notification_email, subject=email_subject, body=body))

    def send_booking_notification(
        self,
        booking_id: int,
        customer_name: str,
        customer_email: str,
        service_type: str,
        scheduled_date: Optional[date] = None,
        scheduled_time: Optional[time_of_day] = None,
    ) -> None:
        """Tell the business inbox about a new booking request."""
        when = "To be arranged"
        if scheduled_date:
            when = scheduled_date.strftime("%A %d %B %Y")
            if scheduled_time:
                when += f" at {scheduled_time.strftime('%H:%M')}"

        body = BOOKING_TEMPLATE.format(
            booking_id=booking_id,
            name=html.escape(customer_name),
            email=html.escape(customer_email, quote=True),
            service_type=html.escape(service_type),
            when=html.escape(when),
        )
        self.send_email(
            EmailMessage(
                to=self.notification_email,
                subject=f"New Booking Request #{booking_id}: {service_type}",
                body=body,
            )
        )


CONTACT_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: 'Segoe UI', Tahoma, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2 style="background: #d32f2f; color: white; padding: 20px; margin: 0;">New Contact Form Submission</h2>
    <div style="background: #f9f9f9; padding: 20px; border: 1px solid #ddd;">
      <p><strong>From:</strong> {name}</p>
      <p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>
      <hr>
      <p><strong>Message:</strong></p>
      <div style="white-space: pre-wrap;">{message}</div>
    </div>
    <p style="font-size: 12px; color: #999;">Sent from the XF Tradesmen website contact form.
    Reply directly to the sender's email address.</p>
  </div>
</body>
</html>"""


BOOKING_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: 'Segoe UI', Tahoma, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2 style="background: #d32f2f; color: white; padding: 20px; margin: 0;">New Booking Request #{booking_id}</h2>
    <div style="background: #f9f9f9; padding: 20px; border: 1px solid #ddd;">
      <p><strong>Customer:</strong> {name}</p>
      <p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>
      <p><strong>Service:</strong> {service_type}</p>
      <p><strong>When:</strong> {when}</p>
    </div>
    <p style="font-size: 12px; color: #999;">Confirm the booking from the admin dashboard.</p>
  </div>
</body>
</html>"""
