"""
Customer API routes - enquiries, projects and quotation requests.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.database import get_session
from kvb_crm.api.deps import get_current_customer
from kvb_crm.models.user import Customer
from kvb_crm.services.enquiry_service import EnquiryService
from kvb_crm.services.quotation_service import QuotationService
from kvb_crm.schemas.enquiry import EnquirySubmitResponse, EnquiryListResponse, ProjectListResponse
from kvb_crm.schemas.quotation import QuotationRequest, QuotationRequestResponse, QuotationResponse

router = APIRouter(prefix="/api/customer", tags=["customer"])

# Quotation requests live next to the customer auth routes
quotation_router = APIRouter(prefix="/api/customer-auth", tags=["customer"])


@router.post("/enquiries", response_model=EnquirySubmitResponse, status_code=201)
async def submit_enquiry(
    product_id: uuid.UUID = Form(...),
    message: str = Form(""),
    region: Optional[str] = Form(None),
    attachments: List[UploadFile] = File(default=[]),
    current_customer: Customer = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    """
    Submit an enquiry about a product, with up to 5 attachments.
    The enquiry is noted on the customer's lead (created if missing) and
    confirmed by email.
    """
    enquiry = await EnquiryService(session).submit_enquiry(
        current_customer, product_id, message, region, attachments
    )
    return {"message": "Enquiry submitted successfully", "enquiry": enquiry}


@router.get("/enquiries", response_model=EnquiryListResponse)
async def list_enquiries(
    current_customer: Customer = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    enquiries = await EnquiryService(session).list_customer_enquiries(current_customer)
    return {"enquiries": enquiries}


@router.get("/projects", response_model=ProjectListResponse)
async def list_projects(
    current_customer: Customer = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    """Quotations and tasks of the signed-in customer, newest first."""
    projects = await EnquiryService(session).list_customer_projects(current_customer)
    return {"projects": projects}


@quotation_router.post("/quotation", response_model=QuotationRequestResponse, status_code=201)
async def request_quotation(
    request: QuotationRequest,
    current_customer: Customer = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    quotation = await QuotationService(session).request_quotation(request, current_customer)
    return {"message": "Quotation request submitted successfully", "quotation": quotation}


@quotation_router.get("/quotations", response_model=List[QuotationResponse])
async def list_my_quotations(
    current_customer: Customer = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    return await QuotationService(session).list_customer_quotations(current_customer)
