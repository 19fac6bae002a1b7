"""
Quote model - priced proposals sent to customers.
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
import enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradesmen.lib.db import Base


class QuoteStatus(str, enum.Enum):
    """Quote lifecycle: draft -> sent -> viewed -> accepted/rejected, or expired."""
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Quote(Base):
    """
    Quote entity. Money is stored as integer pence.
    """
    __tablename__ = "quotes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    # [{"description": str, "quantity": int, "unit_price": int}, ...]
    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    subtotal_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    valid_until: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    status: Mapped[QuoteStatus] = mapped_column(
        SQLEnum(
            QuoteStatus,
            name="quote_status",
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=QuoteStatus.DRAFT,
        index=True,
    )

    # Customer response
    customer_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Not a foreign key: bookings already reference quotes
    booking_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Quote(id={self.id}, title={self.title}, status={self.status})>"
