"""
Booking BMC - data access for the bookings table.
"""
from datetime import date, datetime, time, timezone
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import select, update

from tradesmen.models.bookings import Booking, BookingStatus
from tradesmen.services.base import BaseBmc


class BookingForCreate(BaseModel):
    """Data required to create a booking."""
    customer_id: Optional[int] = Field(None, description="Existing customer id")
    service_type: str = Field(..., min_length=1, max_length=100, examples=["plumbing"])
    scheduled_date: Optional[date] = Field(None, examples=["2025-01-15"])
    scheduled_time: Optional[time] = Field(None, examples=["10:00"])
    notes: Optional[str] = Field(None, max_length=5000)


class BookingPatch(BaseModel):
    """
    Partial update for a booking.

    Only fields the caller actually sent are written; an explicit ``null``
    clears the column.
    """
    status: Optional[BookingStatus] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    estimated_duration: Optional[int] = Field(None, ge=0)
    customer_rating: Optional[int] = Field(None, ge=1, le=5)
    customer_review: Optional[str] = Field(None, max_length=5000)


class BookingService(BaseBmc):
    """Booking BMC: create/get/list/update/delete for bookings."""

    model = Booking
    entity = "Booking"

    def create(self, data: BookingForCreate) -> int:
        """Create a booking in ``pending`` state and return its id."""
        booking = Booking(
            customer_id=data.customer_id,
            service_type=data.service_type,
            scheduled_date=data.scheduled_date,
            scheduled_time=data.scheduled_time,
            notes=data.notes,
            status=BookingStatus.PENDING,
        )
        return self._insert(booking)

    def get(self, booking_id: int) -> Booking:
        return self._get(booking_id)

    def list(self) -> List[Booking]:
        """All bookings, newest first."""
        stmt = select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
        return list(self.session.execute(stmt).scalars().all())

    def list_by_status(
        self, status: BookingStatus, customer_id: Optional[int] = None
    ) -> List[Booking]:
        """Bookings in one status, soonest scheduled first; unscheduled last.

        Narrowed to one customer when ``customer_id`` is given.
        """
        criteria = [Booking.status == status]
        if customer_id is not None:
            criteria.append(Booking.customer_id == customer_id)
        stmt = (
            select(Booking)
            .where(*criteria)
            .order_by(
                Booking.scheduled_date.asc().nulls_last(),
                Booking.scheduled_time.asc().nulls_last(),
                Booking.id.asc(),
            )
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_by_customer(self, customer_id: int) -> List[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.customer_id == customer_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def update(self, booking_id: int, patch: BookingPatch) -> None:
        values = patch.model_dump(exclude_unset=True)
        # status is NOT NULL; a null status means "leave it alone"
        if "status" in values and values["status"] is None:
            values.pop("status")
        if not values:
            # Nothing to write; still report unknown ids
            self._get(booking_id)
            return
        self._execute_update(
            update(Booking).where(Booking.id == booking_id).values(**values),
            booking_id,
        )

    def update_status(self, booking_id: int, status: BookingStatus) -> None:
        self._execute_update(
            update(Booking).where(Booking.id == booking_id).values(status=status),
            booking_id,
        )

    def complete(self, booking_id: int, actual_duration: int) -> None:
        """Mark a booking completed and record how long the job took (minutes)."""
        self._execute_update(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(
                status=BookingStatus.COMPLETED,
                completed_at=datetime.now(timezone.utc),
                actual_duration=actual_duration,
            ),
            booking_id,
        )
