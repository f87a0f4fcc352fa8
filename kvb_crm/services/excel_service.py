"""
Excel service - bulk import and export for the admin panel.

Imports read the first sheet, skip the header row and take columns by
position. Rows missing required values are skipped and only counted.
"""
import logging
import uuid
import zipfile
from datetime import datetime, timedelta
from io import BytesIO
from typing import Any, Iterator, List, Optional, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.config import settings
from kvb_crm.core.exceptions import raise_bad_request
from kvb_crm.core.security import get_unusable_password_hash
from kvb_crm.models.task import Task, TaskStatus, TaskPriority
from kvb_crm.models.user import PrincipalBase, Region
from kvb_crm.repositories.product_repo import ProductRepository
from kvb_crm.repositories.task_repo import TaskRepository
from kvb_crm.repositories.user_repo import CustomerRepository, WorkerRepository, SalesRepository
from kvb_crm.services.product_service import parse_specifications

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_TYPES = ("customers", "tasks", "products", "sales")


def read_rows(content: bytes) -> Iterator[Tuple[Any, ...]]:
    """Data rows of the first worksheet, header skipped."""
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError):
        raise_bad_request("Invalid Excel file")

    worksheet = workbook.worksheets[0]
    for row in worksheet.iter_rows(min_row=2, values_only=True):
        if row and any(value is not None and str(value).strip() for value in row):
            yield row


def cell(row: Tuple[Any, ...], position: int) -> Any:
    """1-based column access that tolerates short rows."""
    return row[position - 1] if len(row) >= position else None


def text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def to_uuid(value: Any) -> Optional[uuid.UUID]:
    raw = text(value).strip("[]'\" ")
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def to_uuid_list(value: Any) -> List[uuid.UUID]:
    ids = [to_uuid(part) for part in text(value).replace(";", ",").split(",")]
    return [worker_id for worker_id in ids if worker_id]


def to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    raw = text(value)
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


class ExcelService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.product_repo = ProductRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.worker_repo = WorkerRepository(session)
        self.sales_repo = SalesRepository(session)
        self.task_repo = TaskRepository(session)

    # -------------------------------------------------------------------------
    # Import
    # -------------------------------------------------------------------------

    async def import_products(self, content: bytes) -> dict:
        """Columns: name, description, price, category, stock, specifications."""
        products, skipped = [], 0
        for row in read_rows(content):
            name = text(cell(row, 1))
            if not name:
                skipped += 1
                continue
            products.append({
                "name": name,
                "description": text(cell(row, 2)),
                "price": to_float(cell(row, 3)),
                "category": text(cell(row, 4)) or None,
                "stock": to_int(cell(row, 5)),
                "specifications": parse_specifications(cell(row, 6)),
                "images": [],
            })

        created = await self.product_repo.bulk_create(products)
        return self._result("products", len(created), skipped)

    async def import_tasks(self, content: bytes, actor: PrincipalBase) -> dict:
        """
        Columns: title, description, priority, status, location, due date,
        worker ids, customer id, product id.
        Title, location and a customer id are required.
        """
        tasks, skipped = [], 0
        for row in read_rows(content):
            title = text(cell(row, 1))
            location = text(cell(row, 5))
            customer_id = to_uuid(cell(row, 8))
            if not title or not location or not customer_id:
                skipped += 1
                continue

            priority = text(cell(row, 3)).lower()
            status = text(cell(row, 4)).lower()
            due_date = to_datetime(cell(row, 6)) or (
                datetime.utcnow() + timedelta(days=settings.INSTALLATION_DUE_DAYS)
            )
            workers = await self.worker_repo.get_many(to_uuid_list(cell(row, 7)))

            tasks.append(Task(
                title=title,
                description=text(cell(row, 2)),
                priority=priority if priority in TaskPriority.ALL else TaskPriority.MEDIUM,
                status=status if status in TaskStatus.ALL else TaskStatus.PENDING,
                location=location,
                due_date=due_date,
                customer_id=customer_id,
                product_id=to_uuid(cell(row, 9)),
                assigned_by_type=actor.kind,
                assigned_by_id=actor.id,
                assigned_workers=workers
            ))

        self.session.add_all(tasks)
        await self.session.commit()
        return self._result("tasks", len(tasks), skipped)

    async def import_customers(self, content: bytes) -> dict:
        """
        Columns: full name, email, phone, company, region, address.
        Emails already on file are skipped. Imported customers cannot log in
        until their password is reset by an admin.
        """
        customers, skipped = [], 0
        seen = set()
        for row in read_rows(content):
            full_name = text(cell(row, 1))
            email = text(cell(row, 2)).lower()
            if not full_name or not email or email in seen or await self.customer_repo.get_by_email(email):
                skipped += 1
                continue
            seen.add(email)
            customers.append({
                "full_name": full_name,
                "email": email,
                "phone": text(cell(row, 3)),
                "company": text(cell(row, 4)) or None,
                "region": text(cell(row, 5)) or Region.CENTRAL,
                "address": text(cell(row, 6)),
                "password_hash": get_unusable_password_hash(),
            })

        for data in customers:
            self.session.add(self.customer_repo.model(**data))
        await self.session.commit()
        return self._result("customers", len(customers), skipped)

    @staticmethod
    def _result(kind: str, imported: int, skipped: int) -> dict:
        logger.info(f"Imported {imported} {kind}, skipped {skipped} row(s)")
        return {
            "message": f"{imported} {kind} imported successfully",
            "total_rows": imported + skipped,
            "imported": imported,
            "skipped": skipped,
        }

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    async def export(self, export_type: str) -> bytes:
        """Build an .xlsx workbook for one collection."""
        if export_type not in EXPORT_TYPES:
            raise_bad_request("Invalid export type")

        headers, rows = await getattr(self, f"_{export_type}_rows")()

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = export_type
        worksheet.append(headers)
        for idx in range(1, len(headers) + 1):
            worksheet.cell(row=1, column=idx).font = Font(bold=True)
        for row in rows:
            worksheet.append(row)

        output = BytesIO()
        workbook.save(output)
        return output.getvalue()

    async def _customers_rows(self):
        customers = await self.customer_repo.list()
        headers = ["Name", "Email", "Phone", "Company", "Region", "Address"]
        return headers, [
            [c.full_name, c.email, c.phone, c.company, c.region, c.address]
            for c in customers
        ]

    async def _tasks_rows(self):
        tasks = await self.task_repo.list()
        customers = {c.id: c.full_name for c in await self.customer_repo.list()}
        headers = ["Title", "Description", "Priority", "Status", "Location", "Due Date", "Assigned To", "Customer"]
        return headers, [
            [
                t.title,
                t.description,
                t.priority,
                t.status,
                t.location,
                t.due_date,
                ", ".join(w.full_name for w in t.assigned_workers),
                customers.get(t.customer_id, ""),
            ]
            for t in tasks
        ]

    async def _products_rows(self):
        products = await self.product_repo.list()
        headers = ["Name", "Description", "Price", "Category", "Stock"]
        return headers, [[p.name, p.description, p.price, p.category, p.stock] for p in products]

    async def _sales_rows(self):
        sales = await self.sales_repo.list()
        headers = ["Name", "Email", "Region"]
        return headers, [[s.full_name, s.email, s.region] for s in sales]
