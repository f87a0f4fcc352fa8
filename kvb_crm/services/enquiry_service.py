"""
Enquiry service - customer product enquiries and the customer's project view.
Every enquiry is tied to a lead so sales can pick it up.
"""
import logging
import uuid
from typing import Optional, List

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.core.exceptions import raise_not_found, raise_bad_request
from kvb_crm.models.enquiry import Enquiry
from kvb_crm.models.lead import Lead, LeadStatus
from kvb_crm.models.notification import NotificationKinds
from kvb_crm.models.product import Product
from kvb_crm.models.user import Customer
from kvb_crm.repositories.enquiry_repo import EnquiryRepository
from kvb_crm.repositories.lead_repo import LeadRepository
from kvb_crm.repositories.product_repo import ProductRepository
from kvb_crm.repositories.quotation_repo import QuotationRepository
from kvb_crm.repositories.task_repo import TaskRepository
from kvb_crm.services import email_templates
from kvb_crm.services.lead_service import make_note
from kvb_crm.services.notification_service import NotificationService
from kvb_crm.services.upload_service import UploadService

logger = logging.getLogger(__name__)

ENQUIRY_ATTACHMENT_FOLDER = "enquiry-attachments"
MAX_ENQUIRY_ATTACHMENTS = 5


class EnquiryService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.enquiry_repo = EnquiryRepository(session)
        self.lead_repo = LeadRepository(session)
        self.product_repo = ProductRepository(session)
        self.notifications = NotificationService(session)

    async def submit_enquiry(
        self,
        customer: Customer,
        product_id: uuid.UUID,
        message: str,
        region: Optional[str] = None,
        files: Optional[List[UploadFile]] = None
    ) -> Enquiry:
        """
        Store an enquiry with its attachments, then link it to a lead and
        confirm by email. Upload failures fail the request; linking and
        email failures do not.
        """
        files = [f for f in (files or []) if f.filename]
        if len(files) > MAX_ENQUIRY_ATTACHMENTS:
            raise_bad_request(f"At most {MAX_ENQUIRY_ATTACHMENTS} attachments are allowed")
        if not message or not message.strip():
            raise_bad_request("Message is required")

        product = await self.product_repo.get(product_id)
        if not product:
            raise_not_found("Product")

        attachments = await UploadService().upload_many(files, ENQUIRY_ATTACHMENT_FOLDER)

        enquiry = await self.enquiry_repo.create({
            "customer_id": customer.id,
            "product_id": product.id,
            "message": message.strip(),
            "region": region or customer.region,
            "attachments": attachments,
        })
        logger.info(f"Enquiry {enquiry.id} submitted by customer {customer.id}")

        try:
            lead = await self._link_lead(customer, product, enquiry)
        except SQLAlchemyError as e:
            await self.session.rollback()
            # rollback expires everything loaded in this session
            for obj in (enquiry, customer, product):
                await self.session.refresh(obj)
            logger.error(f"Could not link enquiry {enquiry.id} to a lead: {e}")
        else:
            enquiry.lead_id = lead.id
            enquiry = await self.enquiry_repo.save(enquiry)

        await self.notifications.notify(
            NotificationKinds.ENQUIRY_CONFIRMATION,
            customer.email,
            email_templates.enquiry_confirmation(customer.full_name, product.name),
            entity_type="enquiry",
            entity_id=enquiry.id
        )
        return enquiry

    async def _link_lead(self, customer: Customer, product: Product, enquiry: Enquiry) -> Lead:
        """Note the enquiry on the customer's lead, creating the lead if needed."""
        note = make_note(f"Enquiry for {product.name}: {enquiry.message}")

        lead = await self.lead_repo.get_by_email(customer.email)
        if lead:
            lead.notes = [*lead.notes, note]
            return await self.lead_repo.save(lead)

        return await self.lead_repo.create({
            "name": customer.full_name,
            "email": customer.email,
            "phone": customer.phone,
            "region": enquiry.region,
            "source": "website enquiry",
            "status": LeadStatus.NEW,
            "message": enquiry.message,
            "customer_id": customer.id,
            "notes": [note],
        })

    async def list_customer_enquiries(self, customer: Customer) -> List[Enquiry]:
        return await self.enquiry_repo.list_for_customer(customer.id)

    async def list_customer_projects(self, customer: Customer) -> List[dict]:
        """Quotations and tasks of a customer in one list, newest first."""
        quotations = await QuotationRepository(self.session).list_for_customer(customer.id)
        tasks = await TaskRepository(self.session).list_for_customer(customer.id)

        projects = []
        for quotation in quotations:
            product_name = quotation.product_snapshot.get("name") or "Product"
            projects.append({
                "id": quotation.id,
                "type": "quotation",
                "title": f"Quotation for {product_name}",
                "description": quotation.details or f"Quotation request for {product_name}",
                "status": quotation.status,
                "product_id": quotation.product_id,
                "attachments": [],
                "created_at": quotation.created_at,
                "updated_at": quotation.updated_at,
            })
        for task in tasks:
            projects.append({
                "id": task.id,
                "type": "task",
                "title": task.title,
                "description": task.description,
                "status": task.status,
                "product_id": task.product_id,
                "location": task.location,
                "due_date": task.due_date,
                "attachments": task.attachments,
                "created_at": task.created_at,
                "updated_at": task.updated_at,
            })

        projects.sort(key=lambda project: project["created_at"], reverse=True)
        return projects
