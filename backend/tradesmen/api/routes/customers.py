"""
Customer routes (admin CRM).
"""
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from tradesmen.api.dependencies import get_customer_service
from tradesmen.api.middleware.error_handler import NotFoundException
from tradesmen.api.schemas import CreatedResponse
from tradesmen.services.customer_service import CustomerForCreate, CustomerPatch, CustomerService

router = APIRouter(prefix="/api/customers", tags=["customers"])


class CustomerResponse(BaseModel):
    """Customer record."""
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    addresses: Optional[Any] = None
    notes: Optional[str] = None
    tags: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TagRequest(BaseModel):
    tag: str = Field(..., min_length=1, max_length=50)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerForCreate,
    customers: CustomerService = Depends(get_customer_service),
):
    return CreatedResponse(id=customers.create(payload))


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    q: Optional[str] = Query(None, min_length=1, description="Search name or email"),
    customers: CustomerService = Depends(get_customer_service),
):
    """List customers by name, or search when ``q`` is given (max 50 results)."""
    if q:
        return customers.search(q)
    return customers.list()


@router.get("/by-email", response_model=CustomerResponse)
def get_customer_by_email(
    email: str = Query(..., min_length=3),
    customers: CustomerService = Depends(get_customer_service),
):
    customer = customers.get_by_email(email)
    if customer is None:
        raise NotFoundException("Customer")
    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, customers: CustomerService = Depends(get_customer_service)):
    return customers.get(customer_id)


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    patch: CustomerPatch,
    customers: CustomerService = Depends(get_customer_service),
):
    """Partially update a customer; only fields present in the body change."""
    customers.update(customer_id, patch)
    return customers.get(customer_id)


@router.post("/{customer_id}/tags", response_model=CustomerResponse)
def add_customer_tag(
    customer_id: int,
    payload: TagRequest,
    customers: CustomerService = Depends(get_customer_service),
):
    customers.add_tag(customer_id, payload.tag.strip())
    return customers.get(customer_id)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, customers: CustomerService = Depends(get_customer_service)):
    customers.delete(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
