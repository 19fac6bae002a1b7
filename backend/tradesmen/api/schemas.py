"""
Response envelopes shared by the public endpoints.
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard envelope used by the website-facing endpoints."""
    success: bool
    message: str
    data: Optional[T] = None

    @classmethod
    def ok(cls, message: str, data: Optional[T] = None) -> "ApiResponse[T]":
        return cls(success=True, message=message, data=data)


class CreatedResponse(BaseModel):
    """Returned by admin create endpoints."""
    id: int
