from datetime import date, datetime, time, timedelta, timezone

from stockroom.models.category import Category
from stockroom.models.product import Product
from stockroom.models.stock_movement import StockMovement
from stockroom.services.report_service import default_statistics_window, get_movement_statistics


def _seed_catalog(session_local) -> dict[str, int]:
    db = session_local()
    try:
        electronics = Category(name="Electronics")
        office = Category(name="Office")
        empty = Category(name="Garden")
        db.add_all([electronics, office, empty])
        db.flush()
        products = [
            Product(category_id=electronics.id, name="Headphones", sku="ELC-001", price=14999, quantity=45),
            Product(category_id=electronics.id, name="Power Bank", sku="ELC-003", price=4999, quantity=8),
            Product(category_id=electronics.id, name="Keyboard", sku="ELC-004", price=8999, quantity=0),
            Product(category_id=office.id, name="Stapler", sku="OFF-002", price=1250, quantity=2),
        ]
        db.add_all(products)
        db.commit()
        return {product.sku: product.id for product in products}
    finally:
        db.close()


def _noon(day: date) -> datetime:
    return datetime.combine(day, time(12, 0))


def test_dashboard_stats(test_context):
    client, session_local = test_context
    ids = _seed_catalog(session_local)

    res = client.get("/stats")
    assert res.status_code == 200
    body = res.json()

    assert body["totalProducts"] == 4
    assert body["totalValue"] == 14999 * 45 + 4999 * 8 + 1250 * 2
    assert body["lowStockCount"] == 2
    assert body["outOfStockCount"] == 1
    assert body["categoriesCount"] == 3

    assert [item["sku"] for item in body["lowStockProducts"]] == ["OFF-002", "ELC-003"]
    assert body["lowStockProducts"][0] == {
        "id": ids["OFF-002"],
        "name": "Stapler",
        "sku": "OFF-002",
        "category": "Office",
        "quantity": 2,
    }
    assert body["categoryBreakdown"] == [
        {"name": "Electronics", "value": 3},
        {"name": "Office", "value": 1},
        {"name": "Garden", "value": 0},
    ]


def test_dashboard_stats_on_empty_store(test_context):
    client, _ = test_context
    body = client.get("/stats").json()
    assert body["totalProducts"] == 0
    assert body["totalValue"] == 0
    assert body["lowStockProducts"] == []
    assert body["categoryBreakdown"] == []


def test_movement_statistics_scenario(test_context, auth_headers):
    client, session_local = test_context
    ids = _seed_catalog(session_local)
    today = datetime.now(timezone.utc).date()
    day1 = today - timedelta(days=3)
    day2 = today - timedelta(days=2)

    db = session_local()
    try:
        db.add_all(
            [
                StockMovement(
                    product_id=ids["ELC-004"],
                    product_sku="ELC-004",
                    type="in",
                    quantity=10,
                    previous_quantity=0,
                    new_quantity=10,
                    created_at=_noon(day1),
                ),
                StockMovement(
                    product_id=ids["ELC-004"],
                    product_sku="ELC-004",
                    type="out",
                    quantity=3,
                    previous_quantity=10,
                    new_quantity=7,
                    created_at=_noon(day2),
                ),
                # Outside the default window.
                StockMovement(
                    product_id=ids["ELC-004"],
                    product_sku="ELC-004",
                    type="in",
                    quantity=99,
                    previous_quantity=0,
                    new_quantity=99,
                    created_at=_noon(today - timedelta(days=90)),
                ),
            ]
        )
        db.commit()
    finally:
        db.close()

    res = client.get("/stock/statistics", headers=auth_headers)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["period"] == {
        "from": (today - timedelta(days=30)).isoformat(),
        "to": today.isoformat(),
    }
    assert body["totals"] == {"stock_in": 10, "stock_out": 3, "net_change": 7}
    assert body["counts"] == {"stock_in_transactions": 1, "stock_out_transactions": 1}
    assert body["daily_breakdown"] == [
        {"date": day1.isoformat(), "stock_in": 10, "stock_out": 0},
        {"date": day2.isoformat(), "stock_in": 0, "stock_out": 3},
    ]

    narrowed = client.get(
        "/stock/statistics",
        params={"from_date": day2.isoformat(), "to_date": day2.isoformat()},
        headers=auth_headers,
    ).json()
    assert narrowed["totals"] == {"stock_in": 0, "stock_out": 3, "net_change": -3}
    assert len(narrowed["daily_breakdown"]) == 1


def test_movement_statistics_empty_window(test_context):
    _, session_local = test_context
    db = session_local()
    try:
        stats = get_movement_statistics(db, date(2020, 1, 1), date(2020, 1, 31))
    finally:
        db.close()
    assert stats["totals"] == {"stock_in": 0, "stock_out": 0, "net_change": 0}
    assert stats["daily_breakdown"] == []


def test_reversed_date_range_is_rejected(test_context, auth_headers):
    client, _ = test_context
    params = {"from_date": "2026-02-10", "to_date": "2026-02-01"}
    for path in ("/stock/statistics", "/stock/movements"):
        res = client.get(path, params=params, headers=auth_headers)
        assert res.status_code == 422
        assert res.json()["error"]["code"] == "validation_error"
        assert res.json()["error"]["details"][0]["field"] == "to_date"


def test_default_statistics_window():
    assert default_statistics_window(date(2026, 3, 31)) == (date(2026, 3, 1), date(2026, 3, 31))
    start, end = default_statistics_window()
    assert end == datetime.now(timezone.utc).date()
    assert (end - start).days == 30


def test_movement_listing_filters(test_context, auth_headers):
    client, _ = test_context
    category = client.post("/categories", json={"name": "Electronics"}, headers=auth_headers).json()
    product = client.post(
        "/products",
        json={"name": "Headphones", "sku": "ELC-001", "category_id": category["id"], "price": 100, "quantity": 20},
        headers=auth_headers,
    ).json()
    client.post(f"/products/{product['id']}/stock-out", json={"quantity": 5}, headers=auth_headers)
    client.post(f"/products/{product['id']}/stock-in", json={"quantity": 2}, headers=auth_headers)

    all_moves = client.get(f"/products/{product['id']}/stock-movements", headers=auth_headers).json()
    assert [item["type"] for item in all_moves["items"]] == ["in", "out", "in"]
    assert [item["new_quantity"] for item in all_moves["items"]] == [17, 15, 20]
    assert all_moves["items"][0]["user"]["name"] == "Admin User"
    assert all_moves["items"][0]["product"] == {"id": product["id"], "name": "Headphones", "sku": "ELC-001"}

    outs = client.get("/stock/movements", params={"type": "out"}, headers=auth_headers).json()
    assert outs["pagination"]["total"] == 1
    assert outs["items"][0]["quantity"] == 5

    missing = client.get("/products/999/stock-movements", headers=auth_headers)
    assert missing.status_code == 404

    assert client.get("/stock/movements").status_code == 401


def test_statistics_window_follows_an_explicit_to_date(test_context, auth_headers):
    client, session_local = test_context
    ids = _seed_catalog(session_local)
    old_day = date(2025, 1, 1)

    db = session_local()
    try:
        db.add(
            StockMovement(
                product_id=ids["ELC-001"],
                product_sku="ELC-001",
                type="out",
                quantity=4,
                previous_quantity=45,
                new_quantity=41,
                created_at=_noon(old_day - timedelta(days=10)),
            )
        )
        db.commit()
    finally:
        db.close()

    res = client.get("/stock/statistics", params={"to_date": old_day.isoformat()}, headers=auth_headers)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["period"] == {"from": "2024-12-02", "to": "2025-01-01"}
    assert body["totals"] == {"stock_in": 0, "stock_out": 4, "net_change": -4}


def test_statistics_window_is_empty_far_in_the_past(test_context, auth_headers):
    client, _ = test_context
    res = client.get("/stock/statistics", params={"to_date": "2019-06-30"}, headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["daily_breakdown"] == []
