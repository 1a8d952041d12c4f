from krixflow.core.config import settings


def stock_up(client, headers):
    items = [
        {"code": "BOLT-M8", "name": "Hex Bolt M8", "category": "Fasteners", "quantity": 100, "price": 0.25},
        {"code": "NUT-M8", "name": "Nut M8", "category": "Fasteners", "quantity": 3, "price": 0.1},
        {"code": "DRL-10", "name": "Drill bit 10mm", "category": "Tools", "quantity": 2},
        {"code": "GLV-L", "name": "Gloves L", "category": "Safety", "quantity": 40, "price": 1.5},
    ]
    for item in items:
        assert client.post("/api/inventory/items", json=item, headers=headers).status_code == 201


def test_distribution_by_category(client, auth_headers):
    stock_up(client, auth_headers)
    res = client.get("/api/inventory/reports", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["data"] == [
        {"name": "Fasteners", "value": 103},
        {"name": "Safety", "value": 40},
        {"name": "Tools", "value": 2},
    ]


def test_distribution_empty(client, auth_headers):
    res = client.get("/api/inventory/reports", headers=auth_headers)
    assert res.json() == {"success": True, "data": []}


def test_summary(client, auth_headers):
    stock_up(client, auth_headers)
    data = client.get("/api/inventory/reports/summary", headers=auth_headers).json()["data"]
    assert data["total_items"] == 4
    assert data["total_quantity"] == 145
    # items without a price count as zero value
    assert data["stock_value"] == 85.3
    assert data["low_stock_threshold"] == settings.low_stock_threshold
    assert data["low_stock_count"] == 2
    assert [i["code"] for i in data["low_stock"]] == ["DRL-10", "NUT-M8"]


def test_movements(client, auth_headers):
    stock_up(client, auth_headers)
    client.delete("/api/inventory/items", params={"code": "BOLT-M8", "quantity": 30}, headers=auth_headers)

    data = client.get("/api/inventory/reports/movements", params={"days": 7}, headers=auth_headers).json()["data"]
    assert len(data) == 7
    assert data[0]["date"] < data[-1]["date"]
    assert data[-1]["in"] == 145
    assert data[-1]["out"] == 30
    assert all(day["in"] == 0 and day["out"] == 0 for day in data[:-1])


def test_reports_require_auth(client):
    assert client.get("/api/inventory/reports/summary").status_code == 401
