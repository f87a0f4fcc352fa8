"""
Lead service - intake, status tracking and the note log.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.core.exceptions import raise_not_found, raise_bad_request
from kvb_crm.models.lead import Lead, LeadStatus
from kvb_crm.models.notification import NotificationKinds
from kvb_crm.models.user import PrincipalBase
from kvb_crm.repositories.lead_repo import LeadRepository
from kvb_crm.schemas.lead import LeadCreate, LeadUpdate, LeadFilter
from kvb_crm.services import email_templates
from kvb_crm.services.email_templates import EmailContent
from kvb_crm.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def make_note(message: str, added_by: Optional[uuid.UUID] = None) -> dict:
    """A note log entry as stored in the JSON column."""
    return {
        "message": message,
        "added_by": str(added_by) if added_by else None,
        "added_at": datetime.utcnow().isoformat(),
    }


class LeadService:
    """Service for lead operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.notifications = NotificationService(session)

    async def create_lead(self, data: LeadCreate, actor: PrincipalBase) -> Lead:
        """Create a lead owned by the acting principal and welcome it by email."""
        lead_data = data.model_dump(exclude={"notes"})
        if lead_data.get("source") is None:
            lead_data["source"] = "website"
        lead_data["assigned_to"] = actor.id
        lead_data["notes"] = [
            make_note(text.strip(), actor.id)
            for text in (data.notes or [])
            if text and text.strip()
        ]

        lead = await self.lead_repo.create(lead_data)
        logger.info(f"Lead {lead.id} created by {actor.kind} {actor.id}")

        await self.notifications.notify(
            NotificationKinds.LEAD_WELCOME,
            lead.email,
            email_templates.lead_welcome(lead.name),
            entity_type="lead",
            entity_id=lead.id
        )
        return lead

    async def get_lead(self, lead_id: uuid.UUID) -> Lead:
        """Get a lead by ID."""
        lead = await self.lead_repo.get(lead_id)
        if not lead:
            raise_not_found("Lead")
        return lead

    async def list_leads(
        self,
        filters: Optional[LeadFilter] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """List leads with filtering and pagination."""
        return await self.lead_repo.search(filters, page, limit)

    async def update_lead(self, lead_id: uuid.UUID, data: LeadUpdate, actor: PrincipalBase) -> Lead:
        """
        Overwrite lead fields.
        Any status string is accepted and replaces the stored one. A `note`
        is appended to the log, never merged into earlier entries.
        """
        lead = await self.get_lead(lead_id)
        previous_status = lead.status

        update_data = data.model_dump(exclude_unset=True, exclude={"note"})
        for field, value in update_data.items():
            if value is not None:
                setattr(lead, field, value)

        if data.note and data.note.strip():
            lead.notes = [*lead.notes, make_note(data.note.strip(), actor.id)]

        lead = await self.lead_repo.save(lead)

        if lead.status != previous_status and lead.status == LeadStatus.FOLLOW_UP_PENDING:
            await self.notifications.notify(
                NotificationKinds.LEAD_FOLLOW_UP,
                lead.email,
                email_templates.follow_up(lead.name, "our solar solutions"),
                entity_type="lead",
                entity_id=lead.id
            )

        return lead

    async def add_note(
        self,
        lead_id: uuid.UUID,
        message: str,
        actor: PrincipalBase,
        added_by: Optional[uuid.UUID] = None
    ) -> Lead:
        """Append a note; `added_by` defaults to the acting principal."""
        if not message or not message.strip():
            raise_bad_request("Note message is required")

        lead = await self.get_lead(lead_id)
        lead.notes = [*lead.notes, make_note(message.strip(), added_by or actor.id)]
        return await self.lead_repo.save(lead)

    async def delete_lead(self, lead_id: uuid.UUID) -> None:
        """Hard delete."""
        deleted = await self.lead_repo.delete(lead_id)
        if not deleted:
            raise_not_found("Lead")

    async def email_lead(self, lead_id: uuid.UUID, subject: str, text: str, html: Optional[str] = None) -> None:
        """Send an ad-hoc email composed by staff to the lead."""
        lead = await self.get_lead(lead_id)
        await self.notifications.send_required(
            NotificationKinds.LEAD_EMAIL,
            lead.email,
            EmailContent(subject, text or "", html),
            entity_type="lead",
            entity_id=lead.id
        )

    async def send_follow_up_email(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        """Send an ad-hoc email to any address."""
        await self.notifications.send_required(
            NotificationKinds.CUSTOM_EMAIL, to, EmailContent(subject, text or "", html)
        )
