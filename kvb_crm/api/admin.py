"""
Admin API routes - people, catalogue, tasks, bulk data and the outbox.
Every route requires the admin cookie.
"""
import uuid
from io import BytesIO
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import StreamingResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.database import get_session
from kvb_crm.api.deps import get_current_admin
from kvb_crm.core.exceptions import raise_bad_request
from kvb_crm.models.user import Admin
from kvb_crm.services.dashboard_service import DashboardService
from kvb_crm.services.excel_service import ExcelService, XLSX_MEDIA_TYPE
from kvb_crm.services.lead_service import LeadService
from kvb_crm.services.notification_service import NotificationService
from kvb_crm.services.product_service import ProductService
from kvb_crm.services.quotation_service import QuotationService
from kvb_crm.services.task_service import TaskService
from kvb_crm.services.user_service import UserService
from kvb_crm.schemas.common import MessageResponse, EmailRequest, ImportResponse, PaginatedResponse
from kvb_crm.schemas.lead import LeadResponse, LeadUpdate, LeadFilter
from kvb_crm.schemas.notification import NotificationResponse
from kvb_crm.schemas.product import ProductResponse
from kvb_crm.schemas.quotation import QuotationResponse, QuotationUpdate
from kvb_crm.schemas.task import TaskCreate, TaskUpdate, TaskResponse
from kvb_crm.schemas.user import (
    CustomerCreate, CustomerUpdate, CustomerResponse,
    WorkerCreate, WorkerUpdate, WorkerResponse, SalesResponse
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# =============================================================================
# CUSTOMERS
# =============================================================================

@router.get("/customers", response_model=List[CustomerResponse])
async def list_customers(
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).list_customers()


@router.post("/customers", response_model=CustomerResponse, status_code=201)
async def create_customer(
    customer_data: CustomerCreate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).create_customer(customer_data.model_dump())


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).get_customer(customer_id)


@router.put("/customers/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: uuid.UUID,
    customer_data: CustomerUpdate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).update_customer(
        customer_id, customer_data.model_dump(exclude_unset=True)
    )


@router.delete("/customers/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    await UserService(session).delete_customer(customer_id)
    return {"message": "Customer deleted successfully"}


# =============================================================================
# WORKERS & SALES
# =============================================================================

@router.get("/workers", response_model=List[WorkerResponse])
async def list_workers(
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).list_workers()


@router.post("/workers", response_model=WorkerResponse, status_code=201)
async def create_worker(
    worker_data: WorkerCreate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).create_worker(worker_data.model_dump())


@router.get("/workers/{worker_id}", response_model=WorkerResponse)
async def get_worker(
    worker_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).get_worker(worker_id)


@router.put("/workers/{worker_id}", response_model=WorkerResponse)
async def update_worker(
    worker_id: uuid.UUID,
    worker_data: WorkerUpdate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).update_worker(
        worker_id, worker_data.model_dump(exclude_unset=True)
    )


@router.delete("/workers/{worker_id}", response_model=MessageResponse)
async def delete_worker(
    worker_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Delete a worker and drop them from every task they were assigned to."""
    await UserService(session).delete_worker(worker_id)
    return {"message": "Worker deleted successfully"}


@router.get("/sales", response_model=List[SalesResponse])
async def list_sales(
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await UserService(session).list_sales()


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
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    filters = LeadFilter(status=status, region=region, assigned_to=assigned_to, search=search)
    return await LeadService(session).list_leads(filters, page, limit)


@router.get("/leads/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await LeadService(session).get_lead(lead_id)


@router.put("/leads/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: uuid.UUID,
    lead_data: LeadUpdate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await LeadService(session).update_lead(lead_id, lead_data, current_admin)


@router.post("/leads/{lead_id}/email", response_model=MessageResponse)
async def send_lead_email(
    lead_id: uuid.UUID,
    email: EmailRequest,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    await LeadService(session).email_lead(lead_id, email.subject, email.text, email.html)
    return {"message": "Email sent successfully to lead"}


# =============================================================================
# QUOTATIONS
# =============================================================================

@router.get("/quotations", response_model=PaginatedResponse[QuotationResponse])
async def list_quotations(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    customer_id: Optional[uuid.UUID] = None,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await QuotationService(session).list_quotations(status, customer_id, page, limit)


@router.get("/quotations/{quotation_id}", response_model=QuotationResponse)
async def get_quotation(
    quotation_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await QuotationService(session).get_quotation(quotation_id)


@router.put("/quotations/{quotation_id}", response_model=QuotationResponse)
async def update_quotation(
    quotation_id: uuid.UUID,
    quotation_data: QuotationUpdate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Accepting a quotation creates its installation task."""
    return await QuotationService(session).update_quotation(quotation_id, quotation_data, current_admin)


@router.post("/quotations/{quotation_id}/email", response_model=MessageResponse)
async def send_quotation_email(
    quotation_id: uuid.UUID,
    email: EmailRequest,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    await QuotationService(session).email_quotation(quotation_id, email.subject, email.text, email.html)
    return {"message": "Email sent successfully to customer"}


# =============================================================================
# PRODUCTS
# =============================================================================

@router.get("/products", response_model=List[ProductResponse])
async def list_products(
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await ProductService(session).list_products()


@router.post("/products", response_model=ProductResponse, status_code=201)
async def create_product(
    name: str = Form(...),
    description: str = Form(""),
    price: float = Form(0),
    category: Optional[str] = Form(None),
    stock: int = Form(0),
    specifications: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Create a product from a multipart form; `specifications` is a JSON string."""
    data = {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "stock": stock,
        "specifications": specifications,
    }
    return await ProductService(session).create_product(data, image)


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await ProductService(session).get_product(product_id)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    category: Optional[str] = Form(None),
    stock: Optional[int] = Form(None),
    specifications: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    data = {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "stock": stock,
        "specifications": specifications,
    }
    return await ProductService(session).update_product(product_id, data, image)


@router.delete("/products/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    await ProductService(session).delete_product(product_id)
    return {"message": "Product deleted successfully"}


# =============================================================================
# TASKS
# =============================================================================

@router.get("/tasks", response_model=PaginatedResponse[TaskResponse])
async def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    customer_id: Optional[uuid.UUID] = None,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await TaskService(session).list_tasks(status, customer_id, page, limit)


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    task_data: TaskCreate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Create a task; each assigned worker is emailed."""
    return await TaskService(session).create_task(task_data, current_admin)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await TaskService(session).get_task(task_id)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    task_data: TaskUpdate,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await TaskService(session).update_task(task_id, task_data)


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    await TaskService(session).delete_task(task_id)
    return {"message": "Task deleted successfully"}


# =============================================================================
# BULK IMPORT / EXPORT
# =============================================================================

async def read_upload(file: Optional[UploadFile]) -> bytes:
    if file is None or not file.filename:
        raise_bad_request("No file uploaded")
    return await file.read()


@router.post("/bulk-import/products", response_model=ImportResponse)
async def import_products(
    file: Optional[UploadFile] = File(None),
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await ExcelService(session).import_products(await read_upload(file))


@router.post("/bulk-import/tasks", response_model=ImportResponse)
async def import_tasks(
    file: Optional[UploadFile] = File(None),
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await ExcelService(session).import_tasks(await read_upload(file), current_admin)


@router.post("/bulk-import/customers", response_model=ImportResponse)
async def import_customers(
    file: Optional[UploadFile] = File(None),
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await ExcelService(session).import_customers(await read_upload(file))


@router.get("/export/{export_type}")
async def export_data(
    export_type: str,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Download customers, tasks, products or sales as .xlsx."""
    content = await ExcelService(session).export(export_type)
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_type}-export.xlsx"}
    )


# =============================================================================
# DASHBOARD & NOTIFICATIONS
# =============================================================================

@router.get("/dashboard")
async def get_dashboard(
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await DashboardService(session).get_stats()


@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    status: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Outbox entries, newest first; filter by pending, sent or failed."""
    return await NotificationService(session).list_notifications(status, limit)


@router.post("/notifications/{notification_id}/retry", response_model=NotificationResponse)
async def retry_notification(
    notification_id: uuid.UUID,
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await NotificationService(session).retry(notification_id)
