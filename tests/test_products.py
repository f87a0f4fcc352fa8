"""Tests for the product catalogue and its public projection."""

import uuid

from kvb_crm.config import settings
from kvb_crm.models.product import Product


async def test_public_listing_is_reduced_view(client, product):
    response = await client.get("/api/products/public")
    assert response.status_code == 200
    (item,) = response.json()
    assert set(item) == {"id", "name", "description", "image"}
    assert item["image"] == product.images[0]


async def test_public_product_without_images_uses_default(client, session):
    bare = Product(name="Battery", description="10kWh")
    session.add(bare)
    await session.commit()

    response = await client.get(f"/api/products/public/{bare.id}")
    assert response.status_code == 200
    assert response.json()["image"] == settings.DEFAULT_PRODUCT_IMAGE


async def test_public_unknown_product_is_404(client):
    response = await client.get(f"/api/products/public/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"


async def test_customer_view_is_full(client, customer, product, auth_headers):
    response = await client.get(f"/api/products/customer/{product.id}", headers=auth_headers(customer))
    assert response.status_code == 200
    body = response.json()
    assert body["price"] == 1000.0
    assert body["stock"] == 4
    assert body["specifications"] == {"capacity": "5kW"}


async def test_customer_view_requires_customer_cookie(client, product, sales, auth_headers):
    response = await client.get("/api/products/customer", headers=auth_headers(sales))
    assert response.status_code == 401


async def test_admin_created_product_round_trips_to_public_view(client, admin, auth_headers, uploads):
    response = await client.post(
        "/api/admin/products",
        data={
            "name": "Inverter 3kW",
            "description": "Grid-tie inverter",
            "price": "450",
            "stock": "7",
            "specifications": '{"phase": "single"}',
        },
        files={"image": ("inverter.png", b"png-bytes", "image/png")},
        headers=auth_headers(admin),
    )
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["specifications"] == {"phase": "single"}
    assert len(created["images"]) == 1
    assert created["images"][0].startswith("https://files.local/products/")

    public = await client.get(f"/api/products/public/{created['id']}")
    assert public.json() == {
        "id": created["id"],
        "name": "Inverter 3kW",
        "description": "Grid-tie inverter",
        "image": created["images"][0],
    }


async def test_invalid_specifications_become_empty(client, admin, auth_headers):
    response = await client.post(
        "/api/admin/products",
        data={"name": "Mounting kit", "specifications": "{not json"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    assert response.json()["specifications"] == {}
    assert response.json()["images"] == []


async def test_update_replaces_image_and_keeps_unsent_fields(client, admin, product, auth_headers):
    response = await client.put(
        f"/api/admin/products/{product.id}",
        data={"price": "1200"},
        files={"image": ("new.jpg", b"jpg", "image/jpeg")},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["price"] == 1200
    assert body["name"] == "Solar Panel 5kW"
    assert len(body["images"]) == 1
    assert body["images"][0].endswith("/new.jpg")


async def test_delete_product(client, admin, product, auth_headers):
    headers = auth_headers(admin)
    response = await client.delete(f"/api/admin/products/{product.id}", headers=headers)
    assert response.status_code == 200

    again = await client.delete(f"/api/admin/products/{product.id}", headers=headers)
    assert again.status_code == 404
