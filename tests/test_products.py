from decimal import Decimal


async def test_list_products_newest_first(client, make_product):
    await make_product(name="Old Lamp")
    await make_product(name="New Mug", category="kitchen")

    resp = await client.get("/products/")

    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["New Mug", "Old Lamp"]


async def test_list_products_filters_by_category_and_query(client, make_product):
    await make_product(name="Desk Lamp", category="home")
    await make_product(name="Coffee Mug", category="kitchen")
    await make_product(name="Travel Mug", category="outdoor")

    by_category = await client.get("/products/", params={"category": "kitchen"})
    assert [p["name"] for p in by_category.json()] == ["Coffee Mug"]

    by_query = await client.get("/products/", params={"query": "mug"})
    assert sorted(p["name"] for p in by_query.json()) == ["Coffee Mug", "Travel Mug"]


async def test_product_detail(client, make_product):
    product = await make_product(name="Desk Lamp", price=Decimal("24.99"), stock_quantity=3)

    resp = await client.get(f"/products/{product.id}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Desk Lamp"
    assert Decimal(body["price"]) == Decimal("24.99")
    assert body["stock_quantity"] == 3
    assert body["in_stock"] is True


async def test_out_of_stock_product_is_flagged(client, make_product):
    product = await make_product(stock_quantity=0)

    resp = await client.get(f"/products/{product.id}")

    assert resp.json()["in_stock"] is False


async def test_missing_product_returns_404(client):
    resp = await client.get("/products/does-not-exist")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Product not found"


async def test_admin_create_product_coerces_numeric_strings(client, admin_headers):
    payload = {
        "name": "Walnut Tray",
        "description": "Hand finished",
        "price": "12.50",
        "image_url": "",
        "stock_quantity": "7",
        "category": "home",
    }

    resp = await client.post("/admin/products/", json=payload, headers=admin_headers)

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert Decimal(body["price"]) == Decimal("12.50")
    assert body["stock_quantity"] == 7
    assert body["image_url"] is None

    listing = await client.get("/admin/products/", headers=admin_headers)
    assert [p["id"] for p in listing.json()] == [body["id"]]


async def test_admin_create_product_rejects_bad_numbers(client, admin_headers):
    base = {"name": "Tray", "category": "home", "price": "5", "stock_quantity": "1"}

    for field, value in (("price", "-1"), ("price", "abc"), ("stock_quantity", "-3")):
        resp = await client.post("/admin/products/", json={**base, field: value}, headers=admin_headers)
        assert resp.status_code == 422, (field, value)


async def test_admin_routes_require_admin_role(client, shopper_headers):
    payload = {"name": "Tray", "category": "home", "price": "5", "stock_quantity": "1"}

    anonymous = await client.post("/admin/products/", json=payload)
    assert anonymous.status_code == 401

    shopper = await client.post("/admin/products/", json=payload, headers=shopper_headers)
    assert shopper.status_code == 403
