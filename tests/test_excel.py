"""Tests for bulk Excel import and export."""

from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook
from sqlmodel import select

from kvb_crm.models.product import Product
from kvb_crm.models.task import Task
from kvb_crm.models.user import Customer


def _workbook(header, rows) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(header)
    for row in rows:
        sheet.append(row)
    output = BytesIO()
    workbook.save(output)
    return output.getvalue()


def _xlsx(content):
    return {"file": ("data.xlsx", content, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")}


async def test_import_products_skips_rows_without_name(client, session, admin, auth_headers):
    content = _workbook(
        ["Name", "Description", "Price", "Category", "Stock", "Specifications"],
        [
            ["Panel A", "Mono panel", 250, "panels", 10, '{"watt": 400}'],
            [None, "No name", 100, "panels", 1, None],
            ["Panel B", None, "not a number", None, None, "broken"],
        ],
    )
    response = await client.post(
        "/api/admin/bulk-import/products", files=_xlsx(content), headers=auth_headers(admin)
    )
    assert response.status_code == 200, response.text
    assert response.json() == {
        "message": "2 products imported successfully",
        "total_rows": 3,
        "imported": 2,
        "skipped": 1,
    }

    products = {p.name: p for p in (await session.exec(select(Product))).all()}
    assert products["Panel A"].specifications == {"watt": 400}
    assert products["Panel A"].stock == 10
    assert products["Panel B"].price == 0.0
    assert products["Panel B"].specifications == {}


async def test_products_router_accepts_excel_upload(client, admin, auth_headers):
    content = _workbook(["Name"], [["Panel C"]])
    response = await client.post("/api/products/upload-excel", files=_xlsx(content), headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["imported"] == 1


async def test_import_customers_skips_duplicates(client, session, admin, customer, auth_headers):
    content = _workbook(
        ["Name", "Email", "Phone", "Company", "Region", "Address"],
        [
            ["Asha", "asha@example.com", 98765, None, None, "1 Main Rd"],
            ["Asha Again", "ASHA@example.com", None, None, None, None],
            ["Existing", customer.email, None, None, None, None],
            ["No Email", None, None, None, None, None],
        ],
    )
    response = await client.post(
        "/api/admin/bulk-import/customers", files=_xlsx(content), headers=auth_headers(admin)
    )
    assert response.json()["imported"] == 1
    assert response.json()["skipped"] == 3

    asha = (await session.exec(select(Customer).where(Customer.email == "asha@example.com"))).one()
    assert asha.region == "Central"
    assert asha.phone == "98765"


async def test_import_tasks_requires_title_location_and_customer(
    client, session, admin, worker, customer, auth_headers
):
    content = _workbook(
        ["Title", "Description", "Priority", "Status", "Location", "Due", "Workers", "Customer", "Product"],
        [
            ["Install", "Roof job", "HIGH", "weird", "Site 1", datetime(2030, 1, 5), str(worker.id), str(customer.id), None],
            ["No location", "", "low", "pending", None, None, None, str(customer.id), None],
            ["No customer", "", "low", "pending", "Site 2", None, None, "not-a-uuid", None],
        ],
    )
    response = await client.post(
        "/api/admin/bulk-import/tasks", files=_xlsx(content), headers=auth_headers(admin)
    )
    assert response.json()["imported"] == 1
    assert response.json()["skipped"] == 2

    task = (await session.exec(select(Task))).one()
    assert task.priority == "high"
    assert task.status == "pending"
    assert task.due_date == datetime(2030, 1, 5)
    assert task.assigned_to == [worker.id]
    assert task.assigned_by_type == "Admin"


async def test_invalid_excel_file(client, admin, auth_headers):
    response = await client.post(
        "/api/admin/bulk-import/products", files=_xlsx(b"not a workbook"), headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid Excel file"


async def test_missing_file(client, admin, auth_headers):
    response = await client.post(
        "/api/admin/bulk-import/customers", data={"note": "nothing attached"}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


@pytest.mark.parametrize("export_type", ["customers", "tasks", "products", "sales"])
async def test_export_returns_workbook(client, admin, customer, product, sales, auth_headers, export_type):
    response = await client.get(f"/api/admin/export/{export_type}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert f"{export_type}-export.xlsx" in response.headers["content-disposition"]

    sheet = load_workbook(BytesIO(response.content)).active
    header = [c.value for c in sheet[1]]
    assert header[0] in ("Name", "Title")
    assert sheet.cell(row=1, column=1).font.bold


async def test_export_products_rows(client, admin, product, auth_headers):
    response = await client.get("/api/admin/export/products", headers=auth_headers(admin))
    rows = list(load_workbook(BytesIO(response.content)).active.iter_rows(min_row=2, values_only=True))
    assert rows == [(product.name, product.description, product.price, product.category, product.stock)]


async def test_unknown_export_type(client, admin, auth_headers):
    response = await client.get("/api/admin/export/invoices", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid export type"
