"""
Contact form routes.

- POST /api/contact: public contact form submission
- GET /api/contacts, GET/DELETE /api/contacts/{id}: admin views
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from pydantic import BaseModel, Field

from tradesmen.api.dependencies import get_contact_service, get_notification_channel
from tradesmen.api.schemas import ApiResponse
from tradesmen.api.validators import validate_email, validate_length, validate_required
from tradesmen.lib.logging import get_logger
from tradesmen.services.contact_service import ContactForCreate, ContactService
from tradesmen.services.notification_service import NotificationChannel

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])

MAX_NAME_LENGTH = 100
MAX_MESSAGE_LENGTH = 5000
MAX_SUBJECT_LENGTH = 200


class ContactForm(BaseModel):
    """Contact form payload from the website."""
    name: str = Field(..., examples=["Jane Smith"])
    email: str = Field(..., examples=["jane@example.com"])
    message: str = Field(..., examples=["My kitchen tap is dripping."])
    subject: Optional[str] = Field(None, examples=["Leaky tap"])

    def sanitized(self) -> "ContactForm":
        """Trimmed copy with the email lower-cased."""
        subject = self.subject.strip() if self.subject else None
        return ContactForm(
            name=self.name.strip(),
            email=self.email.strip().lower(),
            message=self.message.strip(),
            subject=subject or None,
        )

    def validate_form(self) -> None:
        """
        Raises ValidationException for the first problem found.
        """
        validate_required(self.name, "Name")
        validate_length(self.name, 1, MAX_NAME_LENGTH, "Name")
        validate_email(self.email)
        validate_required(self.message, "Message")
        validate_length(self.message, 1, MAX_MESSAGE_LENGTH, "Message")
        if self.subject:
            validate_length(self.subject, 0, MAX_SUBJECT_LENGTH, "Subject")


class ContactCreated(BaseModel):
    id: int


class ContactResponse(BaseModel):
    """Stored contact submission."""
    id: int
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    submitted_at: Optional[datetime] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = {"from_attributes": True}


@router.post("/contact", response_model=ApiResponse[ContactCreated])
def submit_contact(
    form: ContactForm,
    request: Request,
    background_tasks: BackgroundTasks,
    contacts: ContactService = Depends(get_contact_service),
    notifications: NotificationChannel = Depends(get_notification_channel),
) -> ApiResponse[ContactCreated]:
    """
    Store a contact form submission and notify the business inbox.

    The notification email is sent in the background; its outcome never
    changes this response.
    """
    form = form.sanitized()
    form.validate_form()

    contact_id = contacts.create(
        ContactForCreate(
            name=form.name,
            email=form.email,
            subject=form.subject,
            message=form.message,
            ip_address=request.client.host if request.client else None,
            user_agent=(request.headers.get("user-agent") or "")[:500] or None,
        )
    )

    notifications.notify_contact(
        background_tasks,
        name=form.name,
        email=form.email,
        subject=form.subject,
        message=form.message,
    )

    logger.info("Contact form submitted successfully", extra={"contact_id": contact_id})
    return ApiResponse.ok("Contact form submitted successfully", ContactCreated(id=contact_id))


@router.get("/contacts", response_model=List[ContactResponse])
def list_contacts(contacts: ContactService = Depends(get_contact_service)):
    """List contact submissions, most recent first."""
    return contacts.list()


@router.get("/contacts/{contact_id}", response_model=ContactResponse)
def get_contact(contact_id: int, contacts: ContactService = Depends(get_contact_service)):
    return contacts.get(contact_id)


@router.delete("/contacts/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(contact_id: int, contacts: ContactService = Depends(get_contact_service)):
    contacts.delete(contact_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
