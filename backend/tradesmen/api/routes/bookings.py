"""
Booking routes.

- POST /api/booking: public booking request from the website
- /api/bookings: admin CRUD and status transitions
"""
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from pydantic import BaseModel, Field

from tradesmen.api.dependencies import (
    get_booking_service,
    get_customer_service,
    get_notification_channel,
)
from tradesmen.api.schemas import ApiResponse, CreatedResponse
from tradesmen.api.validators import validate_email, validate_length, validate_range
from tradesmen.lib.logging import get_logger
from tradesmen.models.bookings import BookingStatus
from tradesmen.services.booking_service import BookingForCreate, BookingPatch, BookingService
from tradesmen.services.customer_service import CustomerService
from tradesmen.services.notification_service import NotificationChannel

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["bookings"])

# One working day, in minutes
MAX_JOB_DURATION = 24 * 60


class BookingRequest(BaseModel):
    """Public booking form payload."""
    name: str = Field(..., examples=["Jane Smith"])
    email: str = Field(..., examples=["jane@example.com"])
    phone: Optional[str] = Field(None, max_length=30, examples=["07700 900123"])
    service_type: str = Field(..., min_length=1, max_length=100, examples=["plumbing"])
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    notes: Optional[str] = Field(None, max_length=5000)


class BookingRequestCreated(BaseModel):
    booking_id: int
    customer_id: int


class BookingResponse(BaseModel):
    """Booking record."""
    id: int
    customer_id: Optional[int] = None
    service_type: str
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    status: BookingStatus
    quote_id: Optional[int] = None
    estimated_duration: Optional[int] = None
    actual_duration: Optional[int] = None
    notes: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    customer_rating: Optional[int] = None
    customer_review: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StatusUpdate(BaseModel):
    status: BookingStatus


class CompleteRequest(BaseModel):
    actual_duration: int = Field(..., description="Minutes spent on the job")


@router.post(
    "/booking",
    response_model=ApiResponse[BookingRequestCreated],
    status_code=status.HTTP_201_CREATED,
)
def request_booking(
    payload: BookingRequest,
    background_tasks: BackgroundTasks,
    bookings: BookingService = Depends(get_booking_service),
    customers: CustomerService = Depends(get_customer_service),
    notifications: NotificationChannel = Depends(get_notification_channel),
):
    """
    Accept a booking request from the website.

    Reuses the customer with the same email if there is one, creates a
    pending booking and notifies the business inbox in the background.
    """
    name = payload.name.strip()
    email = payload.email.strip().lower()
    validate_length(name, 1, 100, "Name")
    validate_email(email)

    customer = customers.get_or_create(name=name, email=email, phone=payload.phone)
    booking_id = bookings.create(
        BookingForCreate(
            customer_id=customer.id,
            service_type=payload.service_type,
            scheduled_date=payload.scheduled_date,
            scheduled_time=payload.scheduled_time,
            notes=payload.notes,
        )
    )

    notifications.notify_booking(
        background_tasks,
        booking_id=booking_id,
        customer_name=name,
        customer_email=email,
        service_type=payload.service_type,
        scheduled_date=payload.scheduled_date,
        scheduled_time=payload.scheduled_time,
    )

    logger.info(
        "Booking request received",
        extra={"booking_id": booking_id, "customer_id": customer.id},
    )
    return ApiResponse.ok(
        "Booking created successfully! We'll contact you soon.",
        BookingRequestCreated(booking_id=booking_id, customer_id=customer.id),
    )


@router.post("/bookings", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingForCreate,
    bookings: BookingService = Depends(get_booking_service),
):
    return CreatedResponse(id=bookings.create(payload))


@router.get("/bookings", response_model=List[BookingResponse])
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status", description="Filter by status"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    bookings: BookingService = Depends(get_booking_service),
):
    """
    List bookings.

    Filtered by status they are ordered by scheduled date and time;
    otherwise newest first.
    """
    if status_filter is not None:
        return bookings.list_by_status(status_filter, customer_id)
    if customer_id is not None:
        return bookings.list_by_customer(customer_id)
    return bookings.list()


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: int, bookings: BookingService = Depends(get_booking_service)):
    return bookings.get(booking_id)


@router.patch("/bookings/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    patch: BookingPatch,
    bookings: BookingService = Depends(get_booking_service),
):
    bookings.update(booking_id, patch)
    return bookings.get(booking_id)


@router.put("/bookings/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: int,
    payload: StatusUpdate,
    bookings: BookingService = Depends(get_booking_service),
):
    bookings.update_status(booking_id, payload.status)
    return bookings.get(booking_id)


@router.post("/bookings/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: int,
    payload: CompleteRequest,
    bookings: BookingService = Depends(get_booking_service),
):
    validate_range(payload.actual_duration, 1, MAX_JOB_DURATION, "Actual duration")
    bookings.complete(booking_id, payload.actual_duration)
    return bookings.get(booking_id)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: int, bookings: BookingService = Depends(get_booking_service)):
    bookings.delete(booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
