"""
SQLAlchemy models package.
Import all models here to ensure they're registered with Base.metadata.
"""
from tradesmen.models.customers import Customer
from tradesmen.models.contacts import Contact
from tradesmen.models.quotes import Quote, QuoteStatus
from tradesmen.models.bookings import Booking, BookingStatus

__all__ = [
    "Customer",
    "Contact",
    "Quote",
    "QuoteStatus",
    "Booking",
    "BookingStatus",
]
