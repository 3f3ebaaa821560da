"""Store products and orders over HTTP."""

import pytest
from tests.conftest import bearer

STORE = "/api/v1/store"


async def _product(client, admin, **overrides):
    payload = {"name": "Academy Jersey", "price": 800, "stock": 3}
    payload.update(overrides)
    response = await client.post(
        f"{STORE}/products", json=payload, headers=bearer(admin)
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_lifecycle(client, admin, student):
    product = await _product(client, admin)

    order = await client.post(
        f"{STORE}/orders",
        json={"product_id": product["id"], "quantity": 2},
        headers=bearer(student),
    )
    assert order.status_code == 201
    body = order.json()
    assert body["status"] == "pending"
    assert body["amount"] == 1600
    assert body["product"]["name"] == "Academy Jersey"

    too_many = await client.post(
        f"{STORE}/orders",
        json={"product_id": product["id"], "quantity": 2},
        headers=bearer(student),
    )
    assert too_many.status_code == 409
    assert too_many.json()["error"] == "InsufficientStock"

    for status in ("paid", "ready_for_pickup", "completed"):
        moved = await client.put(
            f"{STORE}/orders/{body['id']}/status",
            json={"status": status},
            headers=bearer(admin),
        )
        assert moved.status_code == 200
        assert moved.json()["status"] == status

    mine = await client.get(f"{STORE}/orders", headers=bearer(student))
    assert [o["id"] for o in mine.json()] == [body["id"]]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_student_cannot_manage_catalog(client, student):
    response = await client.post(
        f"{STORE}/products",
        json={"name": "Cap", "price": 300, "stock": 1},
        headers=bearer(student),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_zero_quantity_is_rejected(client, admin, student):
    product = await _product(client, admin)

    response = await client.post(
        f"{STORE}/orders",
        json={"product_id": product["id"], "quantity": 0},
        headers=bearer(student),
    )
    assert response.status_code == 422
