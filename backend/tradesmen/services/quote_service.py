"""
Quote BMC - data access for quotes and quote pricing.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field
from sqlalchemy import select, update

from tradesmen.models.quotes import Quote, QuoteStatus
from tradesmen.services.base import BaseBmc

DEFAULT_VALID_DAYS = 30


class QuoteItem(BaseModel):
    """One priced line on a quote. ``unit_price`` is in pence."""
    description: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., ge=0)
    unit_price: int = Field(..., ge=0)


class QuoteForCreate(BaseModel):
    """Data required to create a quote."""
    customer_id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=200)
    items: List[QuoteItem] = Field(default_factory=list)
    valid_days: Optional[int] = Field(None, ge=0, description="Days until expiry (default 30)")


class QuoteTemplate(BaseModel):
    """A reusable starting point for common jobs."""
    id: int
    name: str
    service_type: str
    items: List[QuoteItem]


QUOTE_TEMPLATES: List[QuoteTemplate] = [
    QuoteTemplate(
        id=1,
        name="Leaky Tap Repair",
        service_type="plumbing",
        items=[
            QuoteItem(description="Call-out fee", quantity=1, unit_price=3000),
            QuoteItem(description="Labour (1 hour)", quantity=1, unit_price=4500),
            QuoteItem(description="Materials", quantity=1, unit_price=500),
        ],
    ),
    QuoteTemplate(
        id=2,
        name="Light Fitting Installation",
        service_type="electrical",
        items=[
            QuoteItem(description="Call-out fee", quantity=1, unit_price=3000),
            QuoteItem(description="Labour (1 hour)", quantity=1, unit_price=5000),
            QuoteItem(description="Standard light fitting", quantity=1, unit_price=2500),
        ],
    ),
    QuoteTemplate(
        id=3,
        name="IKEA Furniture Assembly (Small)",
        service_type="assembly",
        items=[
            QuoteItem(description="Assembly service", quantity=1, unit_price=4500),
        ],
    ),
    QuoteTemplate(
        id=4,
        name="TV Wall Mount",
        service_type="general",
        items=[
            QuoteItem(description="TV mounting service", quantity=1, unit_price=6500),
        ],
    ),
    QuoteTemplate(
        id=5,
        name="Door Hanging",
        service_type="carpentry",
        items=[
            QuoteItem(description="Call-out fee", quantity=1, unit_price=3000),
            QuoteItem(description="Door hanging labour", quantity=1, unit_price=7500),
        ],
    ),
]

# Instant estimate bands in pence, (low, high) per service type
PRICE_BANDS: Dict[str, Tuple[int, int]] = {
    "plumbing": (4500, 12000),
    "electrical": (5000, 15000),
    "carpentry": (6000, 18000),
    "assembly": (3500, 8500),
    "painting": (8000, 25000),
    "general": (4000, 10000),
}

URGENCY_FEES: Dict[str, int] = {
    "same_day": 1500,
    "within_3_days": 0,
    "flexible": -500,
}


class InstantQuote(BaseModel):
    """A rough price range for the website calculator. Amounts are in pence."""
    estimate_low: int
    estimate_high: int
    urgency_fee: int
    message: str


def estimate_instant_quote(service_type: str, urgency: Optional[str] = None) -> InstantQuote:
    """
    Price band for a job before anyone has looked at it.

    Unknown service types fall back to the ``general`` band and unknown
    urgency values add nothing.
    """
    low, high = PRICE_BANDS.get(service_type.strip().lower(), PRICE_BANDS["general"])
    fee = URGENCY_FEES.get(urgency or "", 0)
    low, high = low + fee, high + fee
    return InstantQuote(
        estimate_low=low,
        estimate_high=high,
        urgency_fee=fee,
        message=f"Estimated cost for {service_type} work: £{low / 100:.2f} - £{high / 100:.2f}",
    )


def calculate_totals(items: List[QuoteItem]) -> Dict[str, int]:
    """
    Price a list of line items.

    The discount column exists but is not applied, so total equals subtotal.
    """
    subtotal = sum(item.quantity * item.unit_price for item in items)
    return {"subtotal_cents": subtotal, "discount_cents": 0, "total_cents": subtotal}


class QuoteService(BaseBmc):
    """Quote BMC. Status writes are one-way; no transition rules are enforced."""

    model = Quote
    entity = "Quote"

    def create(self, data: QuoteForCreate) -> int:
        """Create a draft quote with computed totals and expiry date."""
        valid_days = DEFAULT_VALID_DAYS if data.valid_days is None else data.valid_days
        quote = Quote(
            customer_id=data.customer_id,
            title=data.title,
            items=[item.model_dump() for item in data.items],
            valid_until=datetime.now(timezone.utc).date() + timedelta(days=valid_days),
            status=QuoteStatus.DRAFT,
            **calculate_totals(data.items),
        )
        return self._insert(quote)

    def get(self, quote_id: int) -> Quote:
        return self._get(quote_id)

    def _list_where(self, *criteria: Any) -> List[Quote]:
        stmt = (
            select(Quote)
            .where(*criteria)
            .order_by(Quote.created_at.desc(), Quote.id.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def list(self) -> List[Quote]:
        """All quotes, newest first."""
        return self._list_where()

    def list_by_status(self, status: QuoteStatus, customer_id: Optional[int] = None) -> List[Quote]:
        criteria = [Quote.status == status]
        if customer_id is not None:
            criteria.append(Quote.customer_id == customer_id)
        return self._list_where(*criteria)

    def list_by_customer(self, customer_id: int) -> List[Quote]:
        return self._list_where(Quote.customer_id == customer_id)

    def update_status(self, quote_id: int, status: QuoteStatus) -> None:
        self._execute_update(
            update(Quote).where(Quote.id == quote_id).values(status=status),
            quote_id,
        )

    def send(self, quote_id: int) -> None:
        self.update_status(quote_id, QuoteStatus.SENT)

    def accept(
        self,
        quote_id: int,
        booking_id: Optional[int] = None,
        customer_notes: Optional[str] = None,
    ) -> None:
        """Mark accepted, stamping the acceptance time and any linked booking."""
        self._execute_update(
            update(Quote)
            .where(Quote.id == quote_id)
            .values(
                status=QuoteStatus.ACCEPTED,
                accepted_at=datetime.now(timezone.utc),
                booking_id=booking_id,
                customer_notes=customer_notes,
            ),
            quote_id,
        )

    def reject(self, quote_id: int, reason: Optional[str] = None) -> None:
        """Mark rejected; the reason is kept in customer_notes."""
        self._execute_update(
            update(Quote)
            .where(Quote.id == quote_id)
            .values(status=QuoteStatus.REJECTED, customer_notes=reason),
            quote_id,
        )

    @staticmethod
    def templates() -> List[QuoteTemplate]:
        return QUOTE_TEMPLATES
