"""Tests for the upload and email integrations."""

import smtplib
from io import BytesIO

import httpx
import pytest
from fastapi import UploadFile

from kvb_crm.core.exceptions import ExternalServiceError
from kvb_crm.services.email_service import SMTPEmailService
from kvb_crm.services.integrations import cloudinary
from kvb_crm.services.integrations.cloudinary import CloudinaryUploadProvider
from kvb_crm.services.upload_service import MockUploadProvider, UploadService


def _file(name, content=b"data"):
    return UploadFile(file=BytesIO(content), filename=name)


async def test_upload_many_is_all_or_nothing():
    provider = MockUploadProvider(fail_on=3)
    service = UploadService(provider)

    with pytest.raises(ExternalServiceError):
        await service.upload_many([_file("a.jpg"), _file("b.jpg"), _file("c.jpg")], "task-attachments")

    assert provider.files == {}
    assert len(provider.deleted) == 2


async def test_upload_one_describes_stored_file():
    service = UploadService(MockUploadProvider())
    stored = await service.upload_one(_file("meter.jpg", b"12345"), "task-attachments")

    assert stored["filename"] == "meter.jpg"
    assert stored["public_id"].startswith("task-attachments/")
    assert stored["url"].endswith("/meter.jpg")
    assert stored["uploaded_at"]


def test_cloudinary_signature_is_order_independent():
    provider = CloudinaryUploadProvider(cloud_name="demo", api_key="key", api_secret="shh")
    first = provider.sign({"timestamp": "1700000000", "folder": "products"})
    second = provider.sign({"folder": "products", "timestamp": "1700000000"})
    assert first == second
    assert len(first) == 40


@pytest.fixture
def cloudinary_transport(monkeypatch):
    requests = []
    real_client = httpx.AsyncClient

    def install(handler):
        def recording_handler(request):
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)
        monkeypatch.setattr(
            cloudinary.httpx, "AsyncClient", lambda **kwargs: real_client(transport=transport, **kwargs)
        )
        return requests

    return install


async def test_cloudinary_upload_posts_signed_form(cloudinary_transport):
    requests = cloudinary_transport(
        lambda request: httpx.Response(
            200, json={"secure_url": "https://res.cloudinary.com/demo/x.jpg", "public_id": "products/x"}
        )
    )
    provider = CloudinaryUploadProvider(cloud_name="demo", api_key="key", api_secret="shh")

    stored = await provider.upload(b"jpg", "x.jpg", "products", "image/jpeg")

    assert stored == {"url": "https://res.cloudinary.com/demo/x.jpg", "public_id": "products/x"}
    assert str(requests[0].url) == "https://api.cloudinary.com/v1_1/demo/auto/upload"
    body = requests[0].content
    assert b'name="signature"' in body
    assert b'name="api_key"' in body


async def test_cloudinary_error_status_raises(cloudinary_transport):
    cloudinary_transport(lambda request: httpx.Response(401, json={"error": {"message": "bad key"}}))
    provider = CloudinaryUploadProvider(cloud_name="demo", api_key="key", api_secret="shh")

    with pytest.raises(ExternalServiceError) as exc_info:
        await provider.upload(b"jpg", "x.jpg", "products")
    assert exc_info.value.status_code == 502


async def test_smtp_failure_becomes_external_service_error(monkeypatch):
    def refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "service not available")

    monkeypatch.setattr(smtplib, "SMTP", refuse)

    with pytest.raises(ExternalServiceError) as exc_info:
        await SMTPEmailService().send_email("client@example.com", "Hello", "Body")
    assert exc_info.value.message.startswith("SMTP call failed")
