"""
Contact BMC - data access for contact form submissions.
"""
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select

from tradesmen.models.contacts import Contact
from tradesmen.services.base import BaseBmc


class ContactForCreate(BaseModel):
    """A validated contact submission ready to be stored."""
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class ContactService(BaseBmc):
    """Contact BMC. Submissions are write-once; there is no update."""

    model = Contact
    entity = "Contact"

    def create(self, data: ContactForCreate) -> int:
        return self._insert(Contact(**data.model_dump()))

    def get(self, contact_id: int) -> Contact:
        return self._get(contact_id)

    def list(self) -> List[Contact]:
        """All submissions, most recent first."""
        stmt = select(Contact).order_by(Contact.submitted_at.desc(), Contact.id.desc())
        return list(self.session.execute(stmt).scalars().all())
