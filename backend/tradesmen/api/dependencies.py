"""
API dependencies for FastAPI dependency injection.

Provides database-backed BMCs and the notification channel created at
startup.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from tradesmen.lib.db import get_db as get_db_session
from tradesmen.services.booking_service import BookingService
from tradesmen.services.contact_service import ContactService
from tradesmen.services.customer_service import CustomerService
from tradesmen.services.notification_service import NotificationChannel
from tradesmen.services.quote_service import QuoteService


# Re-export get_db for convenience
get_db = get_db_session


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    return ContactService(db)


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    return CustomerService(db)


def get_quote_service(db: Session = Depends(get_db)) -> QuoteService:
    return QuoteService(db)


def get_notification_channel(request: Request) -> NotificationChannel:
    """
    Notification channel built in the application lifespan.

    Falls back to a disabled channel when the lifespan has not run
    (e.g. a TestClient used without a ``with`` block).
    """
    channel = getattr(request.app.state, "notification_channel", None)
    if channel is None:
        return NotificationChannel(None)
    return channel
