"""
Quotation service - issuance, the status tracker and its side effects.

Status changes are compared by inequality only:
- into "quotation sent": the customer gets the quotation email
- into "accepted": the customer gets the acceptance email and an installation
  task is spawned (at most one per quotation)
Emails are best effort and never undo the update.
"""
import logging
import uuid
from typing import Optional, List, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.core.exceptions import raise_not_found, raise_forbidden, raise_bad_request
from kvb_crm.core.security import get_unusable_password_hash
from kvb_crm.models.lead import LeadStatus
from kvb_crm.models.notification import NotificationKinds
from kvb_crm.models.product import Product
from kvb_crm.models.quotation import Quotation, QuotationStatus
from kvb_crm.models.user import PrincipalBase, Customer
from kvb_crm.repositories.lead_repo import LeadRepository
from kvb_crm.repositories.product_repo import ProductRepository
from kvb_crm.repositories.quotation_repo import QuotationRepository
from kvb_crm.repositories.user_repo import CustomerRepository
from kvb_crm.schemas.quotation import QuotationCreate, QuotationRequest, QuotationUpdate
from kvb_crm.services import email_templates
from kvb_crm.services.email_templates import EmailContent
from kvb_crm.services.notification_service import NotificationService
from kvb_crm.services.product_service import public_view
from kvb_crm.services.task_service import TaskService

logger = logging.getLogger(__name__)


def product_snapshot(product: Product) -> dict:
    """The product as quoted, kept on the quotation."""
    return {
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "image": public_view(product)["image"],
    }


class QuotationService:
    """Service for quotation operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.quotation_repo = QuotationRepository(session)
        self.product_repo = ProductRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.lead_repo = LeadRepository(session)
        self.notifications = NotificationService(session)

    async def _get_product(self, product_id: uuid.UUID) -> Product:
        product = await self.product_repo.get(product_id)
        if not product:
            raise_not_found("Product")
        return product

    async def _convert_lead(self, lead_id: uuid.UUID) -> Customer:
        """
        Find or create the customer behind a lead and mark the lead converted.
        A created customer gets an unusable password.
        """
        lead = await self.lead_repo.get(lead_id)
        if not lead:
            raise_not_found("Lead")

        customer = await self.customer_repo.get_by_email(lead.email)
        if not customer:
            customer = await self.customer_repo.create({
                "full_name": lead.name,
                "email": lead.email,
                "phone": lead.phone,
                "address": lead.region or "",
                "region": lead.region,
                "password_hash": get_unusable_password_hash(),
            })
            logger.info(f"Customer {customer.id} created from lead {lead.id}")

        lead.status = LeadStatus.CONVERTED
        lead.customer_id = customer.id
        await self.lead_repo.save(lead)
        return customer

    async def create_quotation(self, data: QuotationCreate, actor: PrincipalBase) -> Quotation:
        """
        Create a quotation.
        Customers always quote for themselves. Staff pass either a
        customer_id or a lead_id, the latter converting the lead.
        """
        product = await self._get_product(data.product_id)

        if actor.role == "customer":
            customer = actor
        elif data.lead_id:
            customer = await self._convert_lead(data.lead_id)
        elif data.customer_id:
            customer = await self.customer_repo.get(data.customer_id)
            if not customer:
                raise_not_found("Customer")
        else:
            raise_bad_request("customer_id or lead_id is required")

        quotation = await self.quotation_repo.create({
            "customer_id": customer.id,
            "product_id": product.id,
            "details": data.details,
            "price": data.price,
            "region": data.region or customer.region,
            "product_snapshot": product_snapshot(product),
            "created_by_type": actor.kind,
            "created_by_id": actor.id,
        })
        logger.info(f"Quotation {quotation.id} created by {actor.kind} {actor.id}")
        return quotation

    async def request_quotation(self, data: QuotationRequest, customer: Customer) -> Quotation:
        """A customer asks for a quotation; price is set later by staff."""
        return await self.create_quotation(
            QuotationCreate(product_id=data.product_id, details=data.details),
            customer
        )

    async def get_quotation(self, quotation_id: uuid.UUID, actor: Optional[PrincipalBase] = None) -> Quotation:
        """Get a quotation; a customer may only read their own."""
        quotation = await self.quotation_repo.get(quotation_id)
        if not quotation:
            raise_not_found("Quotation")
        if actor is not None and actor.role == "customer" and quotation.customer_id != actor.id:
            raise_forbidden()
        return quotation

    async def list_quotations(
        self,
        status: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        return await self.quotation_repo.list_paginated(
            filters={"status": status, "customer_id": customer_id},
            page=page,
            limit=limit
        )

    async def list_customer_quotations(self, customer: Customer) -> List[Quotation]:
        return await self.quotation_repo.list_for_customer(customer.id)

    async def update_quotation(
        self,
        quotation_id: uuid.UUID,
        data: QuotationUpdate,
        actor: PrincipalBase
    ) -> Quotation:
        """Persist the changes, then fire the side effects of a status change."""
        quotation = await self.get_quotation(quotation_id)
        previous_status = quotation.status

        if data.product_id is not None and data.product_id != quotation.product_id:
            product = await self._get_product(data.product_id)
            quotation.product_id = product.id
            quotation.product_snapshot = product_snapshot(product)
        if data.details is not None:
            quotation.details = data.details
        if data.price is not None:
            quotation.price = data.price
        if data.status is not None:
            quotation.status = data.status.value

        quotation = await self.quotation_repo.save(quotation)

        if quotation.status != previous_status:
            logger.info(f"Quotation {quotation.id}: {previous_status} -> {quotation.status}")
            await self._on_status_change(quotation, actor)

        return quotation

    async def _customer_and_product_name(self, quotation: Quotation) -> Tuple[Optional[Customer], str]:
        customer = await self.customer_repo.get(quotation.customer_id)
        product = await self.product_repo.get(quotation.product_id)
        if product:
            product_name = product.name
        else:
            product_name = quotation.product_snapshot.get("name", "your product")
        return customer, product_name

    async def _on_status_change(self, quotation: Quotation, actor: PrincipalBase) -> None:
        if quotation.status == QuotationStatus.QUOTATION_SENT.value:
            customer, product_name = await self._customer_and_product_name(quotation)
            await self.notifications.notify(
                NotificationKinds.QUOTATION_SENT,
                customer.email if customer else None,
                email_templates.quotation_sent(
                    customer.full_name if customer else "Customer", str(quotation.id), product_name
                ),
                entity_type="quotation",
                entity_id=quotation.id
            )

        elif quotation.status == QuotationStatus.ACCEPTED.value:
            customer, product_name = await self._customer_and_product_name(quotation)
            await self.notifications.notify(
                NotificationKinds.QUOTATION_ACCEPTED,
                customer.email if customer else None,
                email_templates.quotation_accepted(
                    customer.full_name if customer else "Customer", str(quotation.id), product_name
                ),
                entity_type="quotation",
                entity_id=quotation.id
            )
            await TaskService(self.session).spawn_installation_task(quotation, customer, product_name, actor)

    async def delete_quotation(self, quotation_id: uuid.UUID) -> None:
        deleted = await self.quotation_repo.delete(quotation_id)
        if not deleted:
            raise_not_found("Quotation")

    async def email_quotation(
        self,
        quotation_id: uuid.UUID,
        subject: str,
        text: str,
        html: Optional[str] = None
    ) -> None:
        """Send an ad-hoc email about a quotation to its customer."""
        quotation = await self.get_quotation(quotation_id)
        customer = await self.customer_repo.get(quotation.customer_id)
        if not customer:
            raise_not_found("Customer")
        await self.notifications.send_required(
            NotificationKinds.QUOTATION_EMAIL,
            customer.email,
            EmailContent(subject, text or "", html),
            entity_type="quotation",
            entity_id=quotation.id
        )
