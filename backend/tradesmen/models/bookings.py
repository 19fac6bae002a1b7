"""
Booking model - scheduled tradesman jobs.
"""
from datetime import date, datetime, time, timezone
from typing import Optional
import enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradesmen.lib.db import Base


class BookingStatus(str, enum.Enum):
    """Booking lifecycle: pending -> confirmed -> completed (or cancelled)."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    """
    Booking entity - one requested or scheduled job.
    """
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    service_type: Mapped[str] = mapped_column(String(100), nullable=False)

    # Scheduling
    scheduled_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    scheduled_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)

    # Stored as the lowercase value so the column reads the same as before enums
    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(
            BookingStatus,
            name="booking_status",
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )

    quote_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("quotes.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Durations in minutes
    estimated_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    actual_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Feedback
    customer_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    customer_review: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            "customer_rating IS NULL OR (customer_rating >= 1 AND customer_rating <= 5)",
            name="booking_rating_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, status={self.status}, service_type={self.service_type})>"
