"""
KVB Management System - FastAPI Application
Main entry point with all routes configured.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from kvb_crm.config import settings
from kvb_crm.database import init_db
from kvb_crm.core.exceptions import KVBException, kvb_exception_handler
from kvb_crm.schemas.common import HealthResponse

# Import all API routers
from kvb_crm.api import auth, admin, sales, tasks, customer, products

# Import models to ensure they are registered with SQLModel
from kvb_crm.models import (
    Admin, Sales, Worker, Customer,
    Product, Lead, Quotation,
    Task, TaskAssignment,
    Enquiry, EmailNotification
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    logger.info("Database initialised")
    yield


app = FastAPI(
    title="KVB Management System API",
    description="CRM and field-service backend for solar installations",
    version="1.0.0",
    lifespan=lifespan
)

# Cookies carry the session, so origins must be explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(KVBException, kvb_exception_handler)

# Include all routers
app.include_router(auth.admin_auth_router)
app.include_router(auth.sales_auth_router)
app.include_router(auth.worker_auth_router)
app.include_router(auth.customer_auth_router)
app.include_router(customer.quotation_router)  # /api/customer-auth/quotation(s)
app.include_router(customer.router)
app.include_router(admin.router)
app.include_router(sales.router)
app.include_router(tasks.router)
app.include_router(products.router)


@app.get("/")
async def root():
    return {
        "message": "KVB Management System API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse()
