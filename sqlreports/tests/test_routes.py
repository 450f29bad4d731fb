"""
报表API路由测试
"""
import pytest
from fastapi.testclient import TestClient

from sqlreports.main import app
from sqlreports.services.report_service import set_report_service


@pytest.fixture
def client(report_service):
    set_report_service(report_service)
    yield TestClient(app)
    set_report_service(None)


@pytest.fixture
def reports(make_report):
    make_report("sales/regional.sql", (
        "-- Regional Sales\n"
        "-- Filters: 3, number\n\n"
        "SELECT region, orders, amount FROM sales ORDER BY rowid"
    ))
    make_report("orders.sql", (
        "-- Region Orders\n"
        "-- Variables: region, Region\n\n"
        "SELECT region, orders FROM sales WHERE region = '{{region}}'"
    ))
    make_report("broken.sql", "-- Broken\n-- Colour: red\n\nSELECT 1")
    make_report("events.js", "-- Events\n\ndb.events.find()")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_report_page(client, reports):
    response = client.get("/reports/sales/regional.sql")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Regional Sales" in response.text
    assert "1,234.50" in response.text


def test_report_page_not_ready_shows_form(client, reports):
    response = client.get("/reports/orders.sql")
    assert response.status_code == 200
    assert 'name="region"' in response.text
    assert "<table" not in response.text


def test_report_page_with_macros(client, reports):
    response = client.get("/reports/orders.sql", params={"region": "north"})
    assert response.status_code == 200
    assert 'value="north"' in response.text
    assert "1200" in response.text


def test_report_api(client, reports):
    response = client.get("/api/reports/sales/regional.sql")
    assert response.status_code == 200

    data = response.json()
    assert data["report"] == "sales/regional.sql"
    assert data["database"] == "main"
    assert data["count"] == 3
    assert data["databases"] == [
        {"name": "main", "selected": True},
        {"name": "backup", "selected": False},
    ]
    first_row = data["rows"][0]
    assert first_row["first"] is True
    assert [cell["value"] for cell in first_row["values"]] == ["north", 1200, "1,234.50"]


def test_report_api_database_param(client, reports):
    response = client.get("/api/reports/sales/regional.sql", params={"database": "backup"})
    assert response.status_code == 502
    assert "no such table" in response.json()["detail"]


@pytest.mark.parametrize("path,status_code", [
    ("/api/reports/missing.sql", 404),
    ("/api/reports/orders.sql", 400),
    ("/api/reports/broken.sql", 422),
    ("/api/reports/events.js", 501),
    ("/reports/missing.sql", 404),
])
def test_report_errors(client, reports, path, status_code):
    response = client.get(path)
    assert response.status_code == status_code
    assert response.json()["detail"]
