"""HTTP surface of the transaction engine, exercised through the Flask test client."""

from decimal import Decimal

import pytest

from printdesk.extensions import db
from printdesk.models import IdentifierSequence, Transaction

from conftest import points_of, stock_of


def _body(**overrides):
    body = {
        "customer_id": "C00001",
        "staff_id": "S00001",
        "payment_method": "Card",
        "items": [{"item_id": "I00001", "quantity": 2}],
    }
    body.update(overrides)
    return body


def test_post_transaction_applies_membership(client, directory, inventory, make_membership):
    make_membership("C00001", points=10000)

    response = client.post("/api/transactions/", json=_body())

    assert response.status_code == 201
    data = response.get_json()
    assert data["transaction_id"] == "T00001"
    assert Decimal(data["final_total"]) == Decimal("290000")
    assert data["benefit"]["points_redeemed"] == 10000
    assert points_of("C00001") == 0
    assert stock_of("I00001") == 48


def test_post_insufficient_stock(client, directory, inventory):
    response = client.post("/api/transactions/", json=_body(items=[{"item_id": "I00001", "quantity": 60}]))

    assert response.status_code == 400
    data = response.get_json()
    assert data["error"] == "InsufficientStock"
    assert data["details"]["available"] == 50
    assert data["details"]["requested"] == 60
    assert stock_of("I00001") == 50


def test_post_missing_fields(client, directory, inventory):
    response = client.post("/api/transactions/", json={"customer_id": "C00001"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationError"


def test_post_non_json_body(client, db_session):
    response = client.post("/api/transactions/", data="not json", content_type="text/plain")

    assert response.status_code == 400


def test_post_unknown_item(client, directory, inventory):
    response = client.post("/api/transactions/", json=_body(items=[{"item_id": "I00099", "quantity": 1}]))

    assert response.status_code == 404
    assert response.get_json()["error"] == "NotFound"


def test_list_and_get_transactions(client, directory, inventory):
    client.post("/api/transactions/", json=_body(customer_id="C00002"))
    client.post("/api/transactions/", json=_body(customer_id="C00003", items=[{"item_id": "I00003", "quantity": 1}]))

    response = client.get("/api/transactions/?limit=1&order_by=id&order_direction=asc")
    assert response.status_code == 200
    data = response.get_json()
    assert data["total_count"] == 2
    assert [t["id"] for t in data["transactions"]] == ["T00001"]
    assert data["transactions"][0]["items"][0]["quantity"] == 2

    response = client.get("/api/transactions/T00002")
    assert response.status_code == 200
    assert response.get_json()["transaction"]["customer_id"] == "C00003"


def test_list_rejects_bad_order_column(client, db_session):
    response = client.get("/api/transactions/?order_by=nope")

    assert response.status_code == 400


def test_get_unknown_transaction(client, db_session):
    response = client.get("/api/transactions/T00999")

    assert response.status_code == 404


def test_update_transaction(client, directory, inventory):
    client.post("/api/transactions/", json=_body(customer_id="C00002"))

    response = client.put("/api/transactions/T00001", json={"customer_id": "C00003", "payment_method": "QRIS"})

    assert response.status_code == 200
    assert response.get_json()["transaction"]["payment_method"] == "QRIS"


def test_delete_transaction_restores_stock(client, directory, inventory):
    client.post("/api/transactions/", json=_body(customer_id="C00002"))
    assert stock_of("I00001") == 48

    response = client.delete("/api/transactions/T00001")

    assert response.status_code == 200
    assert response.get_json()["restored"] == [{"item_id": "I00001", "quantity": 2}]
    assert stock_of("I00001") == 50

    response = client.delete("/api/transactions/T00001")
    assert response.status_code == 404
    assert stock_of("I00001") == 50


def test_stock_report(client, inventory):
    response = client.get("/api/inventory/stock")

    assert response.status_code == 200
    assert [item["id"] for item in response.get_json()["items"]] == ["I00003", "I00001"]


def test_health(client, inventory):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "healthy"
    assert data["database"]["details"]["inventory_items"] == 2


@pytest.mark.parametrize("paper_count", [10 ** 20, 10 ** 17, 2 ** 31])
def test_post_oversized_paper_count_is_a_validation_error(client, directory, inventory, paper_count):
    response = client.post(
        "/api/transactions/",
        json=_body(customer_id="C00002", items=[], printer_id="P00001", paper_count=paper_count),
    )

    assert response.status_code == 400
    data = response.get_json()
    assert data["error"] == "ValidationError"
    assert data["details"]["paper_count"] == paper_count
    assert db.session.query(Transaction).count() == 0


def test_post_total_over_column_limit(client, directory, inventory):
    response = client.post(
        "/api/transactions/",
        json=_body(customer_id="C00002", items=[], printer_id="P00001", paper_count=200000),
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationError"
    assert db.session.query(Transaction).count() == 0
    assert db.session.query(IdentifierSequence).count() == 0


def test_post_total_at_column_limit(client, directory, inventory):
    response = client.post(
        "/api/transactions/",
        json=_body(customer_id="C00002", items=[], printer_id="P00001", paper_count=199999),
    )

    assert response.status_code == 201
    assert Decimal(response.get_json()["final_total"]) == Decimal("99999500")
