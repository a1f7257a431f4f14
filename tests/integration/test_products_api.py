import pytest


def test_list_products_newest_first(client, fake_store):
    res = client.get("/api/v1/products")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert [p["id"] for p in body["data"]] == ["p-tote", "p-mug", "p-shirt"]


def test_list_products_by_category_and_limit(client, fake_store):
    res = client.get("/api/v1/products", params={"category": "apparel", "limit": 1})
    assert [p["id"] for p in res.json()["data"]] == ["p-tote"]


def test_list_products_category_all_is_unfiltered(client, fake_store):
    res = client.get("/api/v1/products", params={"category": "all"})
    assert len(res.json()["data"]) == 3


def test_list_products_store_error(client, fake_store):
    fake_store.fail("products", "select")
    res = client.get("/api/v1/products")
    assert res.status_code == 500
    assert res.json()["success"] is False


def test_list_products_invalid_limit(client, fake_store):
    res = client.get("/api/v1/products", params={"limit": 0})
    assert res.status_code == 400


def _new_product(**overrides):
    body = {
        "name": "Kopi Gayo",
        "description": "Biji kopi 250g",
        "price": 25000,
        "image_url": "https://cdn.example.com/kopi.png",
        "category": "home",
    }
    body.update(overrides)
    return body


def test_create_product_returns_created_row(client, fake_store):
    res = client.post("/api/v1/products", json=_new_product())
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Kopi Gayo"
    assert body["data"]["price"] == 25000
    assert body["data"]["stock"] == 0
    assert body["data"]["id"]
    assert len(fake_store.tables["products"]) == 4


def test_created_product_is_listed_first(client, fake_store):
    client.post("/api/v1/products", json=_new_product(stock=7))
    first = client.get("/api/v1/products").json()["data"][0]
    assert first["name"] == "Kopi Gayo"
    assert first["stock"] == 7


@pytest.mark.parametrize("field", ["name", "description", "price", "image_url", "category"])
def test_create_product_missing_field(client, fake_store, field):
    body = _new_product()
    body.pop(field)
    res = client.post("/api/v1/products", json=body)
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Missing required fields"}
    assert len(fake_store.tables["products"]) == 3


@pytest.mark.parametrize("body", [_new_product(price=0), _new_product(price="abc"), [1, 2]])
def test_create_product_invalid_body(client, fake_store, body):
    res = client.post("/api/v1/products", json=body)
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required fields"


def test_create_product_store_error(client, fake_store):
    fake_store.fail("products", "insert")
    res = client.post("/api/v1/products", json=_new_product())
    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "Failed to create product"}
