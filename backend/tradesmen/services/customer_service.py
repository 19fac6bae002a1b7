"""
Customer BMC - data access for the customers table.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import func, or_, select, update

from tradesmen.lib.logging import get_logger
from tradesmen.models.customers import Customer
from tradesmen.services.base import BaseBmc

logger = get_logger(__name__)

SEARCH_LIMIT = 50


def _escape_like(value: str) -> str:
    """Make % and _ match literally in a LIKE pattern."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CustomerForCreate(BaseModel):
    """Data required to create a customer."""
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, max_length=30)
    addresses: Optional[Any] = Field(None, description="Free-form JSON address data")
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class CustomerPatch(BaseModel):
    """
    Partial update for a customer.

    Every field that is present in the request is written, including
    explicit nulls; absent fields are left unchanged.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, max_length=30)
    addresses: Optional[Any] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class CustomerService(BaseBmc):
    """Customer BMC."""

    model = Customer
    entity = "Customer"

    def create(self, data: CustomerForCreate) -> int:
        values = data.model_dump()
        if values["email"]:
            values["email"] = values["email"].strip().lower()
        return self._insert(Customer(**values))

    def get(self, customer_id: int) -> Customer:
        return self._get(customer_id)

    def get_by_email(self, email: str) -> Optional[Customer]:
        """First customer with this email (case-insensitive), or None."""
        stmt = (
            select(Customer)
            .where(func.lower(Customer.email) == email.strip().lower())
            .order_by(Customer.id.asc())
        )
        return self._first(stmt)

    def get_or_create(self, name: str, email: str, phone: Optional[str] = None) -> Customer:
        """
        Find a customer by email or create one.

        Used by public booking requests so repeat customers are not duplicated.
        """
        existing = self.get_by_email(email)
        if existing is not None:
            logger.info("Matched existing customer", extra={"customer_id": existing.id})
            return existing

        customer_id = self.create(CustomerForCreate(name=name, email=email, phone=phone))
        return self.get(customer_id)

    def list(self) -> List[Customer]:
        stmt = select(Customer).order_by(Customer.name.asc(), Customer.id.asc())
        return list(self.session.execute(stmt).scalars().all())

    def search(self, query: str) -> List[Customer]:
        """Case-insensitive substring match on name or email."""
        term = query.strip()
        if not term:
            return []
        pattern = f"%{_escape_like(term)}%"
        stmt = (
            select(Customer)
            .where(
                or_(
                    Customer.name.ilike(pattern, escape="\\"),
                    Customer.email.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Customer.name.asc(), Customer.id.asc())
            .limit(SEARCH_LIMIT)
        )
        return list(self.session.execute(stmt).scalars().all())

    def update(self, customer_id: int, patch: CustomerPatch) -> None:
        values = patch.model_dump(exclude_unset=True)
        # name and tags are NOT NULL
        for column in ("name", "tags"):
            if column in values and values[column] is None:
                values.pop(column)
        if values.get("email"):
            values["email"] = values["email"].strip().lower()
        if not values:
            self._get(customer_id)
            return
        self._execute_update(
            update(Customer).where(Customer.id == customer_id).values(**values),
            customer_id,
        )

    def add_tag(self, customer_id: int, tag: str) -> None:
        """Append a tag unless the customer already has it."""
        customer = self._get(customer_id)
        tags = list(customer.tags or [])
        if tag in tags:
            return
        tags.append(tag)
        self._execute_update(
            update(Customer).where(Customer.id == customer_id).values(tags=tags),
            customer_id,
        )
