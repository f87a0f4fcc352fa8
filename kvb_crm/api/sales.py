"""
Sales API routes - leads and quotations.
Leads are staff only; quotations are also open to customers, scoped to
their own records.
"""
import uuid
from typing import Optional, Union, List

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.database import get_session
from kvb_crm.api.deps import require_roles
from kvb_crm.models.user import PrincipalBase
from kvb_crm.services.lead_service import LeadService
from kvb_crm.services.quotation_service import QuotationService
from kvb_crm.schemas.lead import (
    LeadCreate, LeadUpdate, LeadResponse, LeadFilter, LeadNoteCreate, LeadNoteResponse,
    FollowUpEmailRequest
)
from kvb_crm.schemas.quotation import QuotationCreate, QuotationUpdate, QuotationResponse
from kvb_crm.schemas.common import MessageResponse, EmailRequest, PaginatedResponse

router = APIRouter(prefix="/api/sales", tags=["sales"])

staff_only = require_roles("sales", "admin")
any_quotation_user = require_roles("customer", "sales", "admin")


# =============================================================================
# LEADS
# =============================================================================

@router.get("/leads", response_model=PaginatedResponse[LeadResponse])
async def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    region: Optional[str] = None,
    assigned_to: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    """List leads with filtering and pagination."""
    filters = LeadFilter(status=status, region=region, assigned_to=assigned_to, search=search)
    return await LeadService(session).list_leads(filters, page, limit)


@router.post("/leads", response_model=LeadResponse, status_code=201)
async def create_lead(
    lead_data: LeadCreate,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    """Create a lead assigned to the current user."""
    return await LeadService(session).create_lead(lead_data, current_user)


@router.get("/leads/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: uuid.UUID,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    return await LeadService(session).get_lead(lead_id)


@router.put("/leads/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: uuid.UUID,
    lead_data: LeadUpdate,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    """Update lead fields and status; `note` is appended to the log."""
    return await LeadService(session).update_lead(lead_id, lead_data, current_user)


@router.delete("/leads/{lead_id}", response_model=MessageResponse)
async def delete_lead(
    lead_id: uuid.UUID,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    await LeadService(session).delete_lead(lead_id)
    return {"message": "Lead deleted successfully"}


@router.post("/leads/{lead_id}/email", response_model=MessageResponse)
async def send_lead_email(
    lead_id: uuid.UUID,
    email: EmailRequest,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    await LeadService(session).email_lead(lead_id, email.subject, email.text, email.html)
    return {"message": "Email sent successfully to lead"}


@router.post("/leads/{lead_id}/notes", response_model=LeadNoteResponse, status_code=201)
async def add_lead_note(
    lead_id: uuid.UUID,
    note: LeadNoteCreate,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    """Append a note to the lead's log."""
    lead = await LeadService(session).add_note(lead_id, note.message, current_user, note.added_by)
    return {"message": "Note added successfully", "lead": lead}


@router.post("/send-email", response_model=MessageResponse)
async def send_follow_up_email(
    email: FollowUpEmailRequest,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    await LeadService(session).send_follow_up_email(email.to, email.subject, email.text, email.html)
    return {"message": "Email sent successfully"}


# =============================================================================
# QUOTATIONS
# =============================================================================

@router.get(
    "/quotations",
    response_model=Union[PaginatedResponse[QuotationResponse], List[QuotationResponse]]
)
async def list_quotations(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    current_user: PrincipalBase = Depends(any_quotation_user),
    session: AsyncSession = Depends(get_session)
):
    """Staff get every quotation, paginated; customers get their own."""
    service = QuotationService(session)
    if current_user.role == "customer":
        return await service.list_customer_quotations(current_user)
    return await service.list_quotations(status=status, page=page, limit=limit)


@router.post("/quotations", response_model=QuotationResponse, status_code=201)
async def create_quotation(
    quotation_data: QuotationCreate,
    current_user: PrincipalBase = Depends(any_quotation_user),
    session: AsyncSession = Depends(get_session)
):
    """Create a quotation; with `lead_id` the lead is converted to a customer."""
    return await QuotationService(session).create_quotation(quotation_data, current_user)


@router.get("/quotations/{quotation_id}", response_model=QuotationResponse)
async def get_quotation(
    quotation_id: uuid.UUID,
    current_user: PrincipalBase = Depends(any_quotation_user),
    session: AsyncSession = Depends(get_session)
):
    return await QuotationService(session).get_quotation(quotation_id, current_user)


@router.put("/quotations/{quotation_id}", response_model=QuotationResponse)
async def update_quotation(
    quotation_id: uuid.UUID,
    quotation_data: QuotationUpdate,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    """Update status, price or details; status changes trigger emails and task creation."""
    return await QuotationService(session).update_quotation(quotation_id, quotation_data, current_user)


@router.delete("/quotations/{quotation_id}", response_model=MessageResponse)
async def delete_quotation(
    quotation_id: uuid.UUID,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    await QuotationService(session).delete_quotation(quotation_id)
    return {"message": "Quotation deleted successfully"}


@router.post("/quotations/{quotation_id}/email", response_model=MessageResponse)
async def send_quotation_email(
    quotation_id: uuid.UUID,
    email: EmailRequest,
    current_user: PrincipalBase = Depends(staff_only),
    session: AsyncSession = Depends(get_session)
):
    await QuotationService(session).email_quotation(quotation_id, email.subject, email.text, email.html)
    return {"message": "Email sent successfully to customer"}
