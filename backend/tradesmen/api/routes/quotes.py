"""
Quote routes.

- /api/quotes: admin quote management
- POST /api/quote/instant: public price estimate for the website
"""
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from tradesmen.api.dependencies import get_quote_service
from tradesmen.api.schemas import CreatedResponse
from tradesmen.models.quotes import QuoteStatus
from tradesmen.services.quote_service import (
    InstantQuote,
    QuoteForCreate,
    QuoteItem,
    QuoteService,
    QuoteTemplate,
    estimate_instant_quote,
)

router = APIRouter(prefix="/api/quotes", tags=["quotes"])
public_router = APIRouter(prefix="/api/quote", tags=["quotes"])


class QuoteResponse(BaseModel):
    """Quote record. Amounts are in pence."""
    id: int
    customer_id: Optional[int] = None
    title: str
    items: List[QuoteItem]
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    valid_until: Optional[date] = None
    status: QuoteStatus
    customer_notes: Optional[str] = None
    accepted_at: Optional[datetime] = None
    booking_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus


class AcceptRequest(BaseModel):
    booking_id: Optional[int] = None
    customer_notes: Optional[str] = Field(None, max_length=5000)


class RejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=5000)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_quote(payload: QuoteForCreate, quotes: QuoteService = Depends(get_quote_service)):
    """Create a draft quote; totals and expiry are computed server-side."""
    return CreatedResponse(id=quotes.create(payload))


@router.get("", response_model=List[QuoteResponse])
def list_quotes(
    status_filter: Optional[QuoteStatus] = Query(None, alias="status", description="Filter by status"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    quotes: QuoteService = Depends(get_quote_service),
):
    """List quotes, newest first."""
    if status_filter is not None:
        return quotes.list_by_status(status_filter, customer_id)
    if customer_id is not None:
        return quotes.list_by_customer(customer_id)
    return quotes.list()


@router.get("/templates", response_model=List[QuoteTemplate])
def list_quote_templates():
    return QuoteService.templates()


@router.get("/{quote_id}", response_model=QuoteResponse)
def get_quote(quote_id: int, quotes: QuoteService = Depends(get_quote_service)):
    return quotes.get(quote_id)


@router.put("/{quote_id}/status", response_model=QuoteResponse)
def update_quote_status(
    quote_id: int,
    payload: QuoteStatusUpdate,
    quotes: QuoteService = Depends(get_quote_service),
):
    quotes.update_status(quote_id, payload.status)
    return quotes.get(quote_id)


@router.post("/{quote_id}/send", response_model=QuoteResponse)
def send_quote(quote_id: int, quotes: QuoteService = Depends(get_quote_service)):
    quotes.send(quote_id)
    return quotes.get(quote_id)


@router.post("/{quote_id}/accept", response_model=QuoteResponse)
def accept_quote(
    quote_id: int,
    payload: Optional[AcceptRequest] = None,
    quotes: QuoteService = Depends(get_quote_service),
):
    payload = payload or AcceptRequest()
    quotes.accept(quote_id, booking_id=payload.booking_id, customer_notes=payload.customer_notes)
    return quotes.get(quote_id)


@router.post("/{quote_id}/reject", response_model=QuoteResponse)
def reject_quote(
    quote_id: int,
    payload: Optional[RejectRequest] = None,
    quotes: QuoteService = Depends(get_quote_service),
):
    payload = payload or RejectRequest()
    quotes.reject(quote_id, reason=payload.reason)
    return quotes.get(quote_id)


@router.delete("/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quote(quote_id: int, quotes: QuoteService = Depends(get_quote_service)):
    quotes.delete(quote_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


class InstantQuoteRequest(BaseModel):
    """Website calculator input."""
    service_type: str = Field(..., min_length=1, max_length=100, examples=["plumbing"])
    description: Optional[str] = Field(None, max_length=5000)
    urgency: Optional[str] = Field(None, examples=["same_day", "within_3_days", "flexible"])


@public_router.post("/instant", response_model=InstantQuote)
def instant_quote(payload: InstantQuoteRequest):
    """Rough price range by service type and urgency; nothing is stored."""
    return estimate_instant_quote(payload.service_type, payload.urgency)
