"""Tests for customer enquiries, their lead linkage and the project view."""

import uuid

from sqlmodel import select

from kvb_crm.models.enquiry import Enquiry
from kvb_crm.models.lead import Lead
from kvb_crm.models.quotation import Quotation
from kvb_crm.services.email_service import get_email_service
from kvb_crm.services.upload_service import MockUploadProvider, set_upload_provider


async def _submit(client, headers, product, message="Interested in a rooftop system", files=None):
    return await client.post(
        "/api/customer/enquiries",
        data={"product_id": str(product.id), "message": message},
        files=files,
        headers=headers,
    )


async def test_enquiry_creates_lead_and_confirms(client, session, customer, product, auth_headers):
    response = await _submit(
        client,
        auth_headers(customer),
        product,
        files=[("attachments", ("roof.jpg", b"roof", "image/jpeg"))],
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["message"] == "Enquiry submitted successfully"
    enquiry = body["enquiry"]
    assert enquiry["region"] == customer.region
    assert enquiry["attachments"][0]["filename"] == "roof.jpg"

    lead = await session.get(Lead, uuid.UUID(enquiry["lead_id"]))
    assert lead.email == customer.email
    assert lead.source == "website enquiry"
    assert lead.customer_id == customer.id
    assert lead.notes[0]["message"] == f"Enquiry for {product.name}: Interested in a rooftop system"
    assert lead.notes[0]["added_by"] is None

    assert get_email_service().sent_emails[-1]["to"] == customer.email


async def test_enquiry_reuses_existing_lead(client, session, sales, customer, product, auth_headers):
    created = await client.post(
        "/api/sales/leads",
        json={"name": customer.full_name, "email": customer.email, "phone": customer.phone},
        headers=auth_headers(sales),
    )
    lead_id = created.json()["id"]

    response = await _submit(client, auth_headers(customer), product, message="Second question")
    assert response.json()["enquiry"]["lead_id"] == lead_id

    leads = (await session.exec(select(Lead).where(Lead.email == customer.email))).all()
    assert len(leads) == 1
    assert leads[0].notes[-1]["message"].endswith("Second question")


async def test_enquiry_validation(client, customer, product, auth_headers):
    headers = auth_headers(customer)

    empty = await _submit(client, headers, product, message="   ")
    assert empty.status_code == 400
    assert empty.json()["detail"] == "Message is required"

    too_many = await _submit(
        client,
        headers,
        product,
        files=[("attachments", (f"f{i}.jpg", b"x", "image/jpeg")) for i in range(6)],
    )
    assert too_many.status_code == 400

    missing = await client.post(
        "/api/customer/enquiries",
        data={"product_id": str(uuid.uuid4()), "message": "Hello"},
        headers=headers,
    )
    assert missing.status_code == 404


async def test_enquiry_upload_failure_stores_nothing(client, session, customer, product, auth_headers):
    provider = MockUploadProvider(fail_on=1)
    set_upload_provider(provider)

    response = await _submit(
        client,
        auth_headers(customer),
        product,
        files=[("attachments", ("roof.jpg", b"roof", "image/jpeg"))],
    )
    assert response.status_code == 502
    assert (await session.exec(select(Enquiry))).all() == []


async def test_list_enquiries_is_scoped(client, customer, make_principal, product, auth_headers):
    other = await make_principal("customer")
    await _submit(client, auth_headers(customer), product)
    await _submit(client, auth_headers(other), product)

    response = await client.get("/api/customer/enquiries", headers=auth_headers(customer))
    body = response.json()
    assert body["success"] is True
    assert [e["customer_id"] for e in body["enquiries"]] == [str(customer.id)]


async def test_projects_merge_quotations_and_tasks(client, session, admin, customer, product, auth_headers):
    quotation = Quotation(
        customer_id=customer.id,
        product_id=product.id,
        details="",
        product_snapshot={"name": product.name},
        created_by_type="Admin",
        created_by_id=admin.id,
    )
    session.add(quotation)
    await session.commit()

    response = await client.put(
        f"/api/admin/quotations/{quotation.id}", json={"status": "accepted"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200

    projects = (await client.get("/api/customer/projects", headers=auth_headers(customer))).json()["projects"]
    assert {p["type"] for p in projects} == {"quotation", "task"}
    by_type = {p["type"]: p for p in projects}
    assert by_type["quotation"]["title"] == f"Quotation for {product.name}"
    assert by_type["quotation"]["description"] == f"Quotation request for {product.name}"
    assert by_type["task"]["location"] == customer.address
    assert projects[0]["type"] == "task"
