"""
Tests for cart endpoints.

These tests verify:
  - A cart can only be opened for an existing user
  - Setting a product quantity adds, replaces, or (with 0) removes a line
  - Frozen carts (CHECKED_OUT / ABANDONED) reject line changes
  - Carts are listed per user and disappear with their user
"""

import uuid


async def _user_id(client, email="shopper@example.com") -> str:
    response = await client.post(
        "/users", json={"name": "Shopper", "email": email, "role": "USER"},
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _cart(client, user_id) -> dict:
    response = await client.post("/carts", json={"user_id": user_id})
    assert response.status_code == 201, response.text
    return response.json()


class TestCartLifecycle:

    async def test_open_cart(self, client):
        user_id = await _user_id(client)

        cart = await _cart(client, user_id)

        assert cart["user_id"] == user_id
        assert cart["status"] == "active"
        assert cart["cart_products"] == []

    async def test_open_cart_unknown_user(self, client):
        response = await client.post("/carts", json={"user_id": str(uuid.uuid4())})
        assert response.status_code == 404

    async def test_get_unknown_cart(self, client):
        response = await client.get(f"/carts/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error_type"] == "cart_is_not_existed"

    async def test_list_user_carts(self, client):
        user_id = await _user_id(client)
        other_id = await _user_id(client, email="other@example.com")
        first = await _cart(client, user_id)
        second = await _cart(client, user_id)
        await _cart(client, other_id)

        response = await client.get(f"/users/{user_id}/carts")
        assert response.status_code == 200
        assert {c["id"] for c in response.json()} == {first["id"], second["id"]}

    async def test_delete_cart(self, client):
        cart = await _cart(client, await _user_id(client))

        response = await client.delete(f"/carts/{cart['id']}")
        assert response.status_code == 200
        assert (await client.get(f"/carts/{cart['id']}")).status_code == 404

    async def test_deleting_user_deletes_carts(self, client):
        user_id = await _user_id(client)
        cart = await _cart(client, user_id)
        await client.put(
            f"/carts/{cart['id']}/products/{uuid.uuid4()}", json={"quantity": 1},
        )

        await client.delete(f"/users/{user_id}")

        assert (await client.get(f"/carts/{cart['id']}")).status_code == 404


class TestCartProducts:

    async def test_add_replace_remove(self, client):
        cart = await _cart(client, await _user_id(client))
        product_id = str(uuid.uuid4())
        url = f"/carts/{cart['id']}/products/{product_id}"

        added = await client.put(url, json={"quantity": 2})
        assert added.status_code == 200
        assert added.json()["cart_products"] == [{"product_id": product_id, "quantity": 2}]

        replaced = await client.put(url, json={"quantity": 5})
        assert replaced.json()["cart_products"] == [{"product_id": product_id, "quantity": 5}]

        removed = await client.put(url, json={"quantity": 0})
        assert removed.json()["cart_products"] == []

    async def test_negative_quantity_rejected(self, client):
        cart = await _cart(client, await _user_id(client))
        response = await client.put(
            f"/carts/{cart['id']}/products/{uuid.uuid4()}", json={"quantity": -1},
        )
        assert response.status_code == 422

    async def test_checked_out_cart_is_frozen(self, client):
        cart = await _cart(client, await _user_id(client))

        response = await client.patch(f"/carts/{cart['id']}", json={"status": "checked_out"})
        assert response.status_code == 200
        assert response.json()["status"] == "checked_out"

        response = await client.put(
            f"/carts/{cart['id']}/products/{uuid.uuid4()}", json={"quantity": 1},
        )
        assert response.status_code == 400
        assert response.json()["error_type"] == "cart_is_not_editable"
