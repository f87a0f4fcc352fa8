"""
Product catalogue API routes.
Anonymous visitors get a reduced view; signed-in customers get full products.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.database import get_session
from kvb_crm.api.deps import get_current_customer, get_current_admin
from kvb_crm.core.exceptions import raise_bad_request
from kvb_crm.models.user import Admin, Customer
from kvb_crm.services.product_service import ProductService
from kvb_crm.services.excel_service import ExcelService
from kvb_crm.schemas.product import ProductResponse, PublicProductResponse
from kvb_crm.schemas.common import ImportResponse

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("/public", response_model=List[PublicProductResponse])
async def list_public_products(session: AsyncSession = Depends(get_session)):
    return await ProductService(session).list_public()


@router.get("/public/{product_id}", response_model=PublicProductResponse)
async def get_public_product(product_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await ProductService(session).get_public(product_id)


@router.get("/customer", response_model=List[ProductResponse])
async def list_customer_products(
    current_customer: Customer = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    return await ProductService(session).list_products()


@router.get("/customer/{product_id}", response_model=ProductResponse)
async def get_customer_product(
    product_id: uuid.UUID,
    current_customer: Customer = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    return await ProductService(session).get_product(product_id)


@router.post("/upload-excel", response_model=ImportResponse)
async def upload_products_excel(
    file: Optional[UploadFile] = File(None),
    current_admin: Admin = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Import products from the first sheet of an .xlsx file."""
    if file is None or not file.filename:
        raise_bad_request("No file uploaded")
    return await ExcelService(session).import_products(await file.read())
