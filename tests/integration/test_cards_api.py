"""Integration tests for card endpoints"""

from datetime import date, timedelta
from fastapi.testclient import TestClient
from conftest import API


def test_create_card(client: TestClient, auth_headers):
    response = client.post(
        f"{API}/cards",
        json={"name": "Visa", "balance": 250.5, "interestRate": 19.99, "dueDate": "2025-01-15", "minimumPayment": 25},
        headers=auth_headers,
    )

    assert response.status_code == 201
    card = response.json()
    assert card["name"] == "Visa"
    assert card["balance"] == 250.5
    assert card["interestRate"] == 19.99
    assert card["dueDate"] == "2025-01-15"
    assert card["minimumPayment"] == 25
    assert card["id"]
    assert card["userId"]


def test_create_card_minimum_payment_defaults_to_zero(create_card):
    card = create_card(minimumPayment=None)
    assert card["minimumPayment"] == 0


def test_create_card_requires_auth(client: TestClient):
    response = client.post(f"{API}/cards", json={"name": "Visa"})
    assert response.status_code == 401


def test_create_card_validation(client: TestClient, auth_headers):
    base = {"name": "Visa", "balance": 0, "interestRate": 20, "dueDate": "2025-01-01"}

    cases = [
        ({"balance": -1}, "Balance must be a positive number"),
        ({"interestRate": 101}, "Interest rate must be between 0 and 100"),
        ({"minimumPayment": -3}, "Minimum payment must be a positive number"),
        ({"name": ""}, "Missing required fields: name"),
    ]
    for overrides, message in cases:
        response = client.post(f"{API}/cards", json={**base, **overrides}, headers=auth_headers)
        assert response.status_code == 400, overrides
        assert response.json() == {"success": False, "error": message}


def test_create_card_unparseable_due_date(client: TestClient, auth_headers):
    response = client.post(
        f"{API}/cards",
        json={"name": "Visa", "balance": 0, "interestRate": 20, "dueDate": "someday"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_list_cards_newest_first(client: TestClient, auth_headers, create_card):
    create_card(name="First")
    create_card(name="Second")

    response = client.get(f"{API}/cards", headers=auth_headers)

    assert response.status_code == 200
    assert [card["name"] for card in response.json()] == ["Second", "First"]


def test_list_cards_scoped_to_user(client: TestClient, other_auth_headers, create_card):
    create_card()

    response = client.get(f"{API}/cards", headers=other_auth_headers)

    assert response.status_code == 200
    assert response.json() == []


def test_get_card_with_transactions(client: TestClient, auth_headers, create_card):
    card = create_card()
    client.post(
        f"{API}/transactions",
        json={"amount": 40, "type": "purchase", "cardId": card["id"], "date": "2025-01-02"},
        headers=auth_headers,
    )
    client.post(
        f"{API}/transactions",
        json={"amount": 60, "type": "purchase", "cardId": card["id"], "date": "2025-02-02"},
        headers=auth_headers,
    )

    response = client.get(f"{API}/cards/{card['id']}", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["balance"] == 100
    assert [txn["amount"] for txn in data["transactions"]] == [60, 40]


def test_get_other_users_card_is_not_found(client: TestClient, other_auth_headers, create_card):
    """Cards of other users look exactly like missing cards"""
    card = create_card()

    foreign = client.get(f"{API}/cards/{card['id']}", headers=other_auth_headers)
    missing = client.get(f"{API}/cards/00000000-0000-0000-0000-000000000000", headers=other_auth_headers)

    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json() == {"success": False, "error": "Card not found"}


def test_get_card_malformed_id_is_not_found(client: TestClient, auth_headers):
    response = client.get(f"{API}/cards/not-a-uuid", headers=auth_headers)
    assert response.status_code == 404


def test_update_card_partial(client: TestClient, auth_headers, create_card):
    card = create_card(minimumPayment=15)

    response = client.put(f"{API}/cards/{card['id']}", json={"name": "Visa Gold", "interestRate": 15}, headers=auth_headers)

    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Visa Gold"
    assert updated["interestRate"] == 15
    assert updated["minimumPayment"] == 15
    assert updated["dueDate"] == card["dueDate"]


def test_update_card_validates_changed_fields(client: TestClient, auth_headers, create_card):
    card = create_card()

    response = client.put(f"{API}/cards/{card['id']}", json={"balance": -10}, headers=auth_headers)

    assert response.status_code == 400
    assert client.get(f"{API}/cards/{card['id']}", headers=auth_headers).json()["balance"] == 0


def test_update_other_users_card_is_not_found(client: TestClient, other_auth_headers, create_card):
    card = create_card()

    response = client.put(f"{API}/cards/{card['id']}", json={"name": "Stolen"}, headers=other_auth_headers)

    assert response.status_code == 404


def test_delete_card_removes_transactions(client: TestClient, auth_headers, create_card):
    card = create_card()
    client.post(f"{API}/transactions", json={"amount": 10, "type": "purchase", "cardId": card["id"]}, headers=auth_headers)

    response = client.delete(f"{API}/cards/{card['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Card and associated transactions deleted successfully"}
    assert client.get(f"{API}/cards/{card['id']}", headers=auth_headers).status_code == 404
    assert client.get(f"{API}/transactions", headers=auth_headers).json() == []


def test_delete_other_users_card_is_not_found(client: TestClient, auth_headers, other_auth_headers, create_card):
    card = create_card()

    response = client.delete(f"{API}/cards/{card['id']}", headers=other_auth_headers)

    assert response.status_code == 404
    assert client.get(f"{API}/cards/{card['id']}", headers=auth_headers).status_code == 200


def test_card_summary(client: TestClient, auth_headers, create_card):
    soon = date.today() + timedelta(days=3)
    later = date.today() + timedelta(days=20)
    create_card(name="Later", balance=300, minimumPayment=30, dueDate=later.isoformat())
    create_card(name="Soon", balance=200, minimumPayment=20, dueDate=soon.isoformat())

    response = client.get(f"{API}/cards/summary", headers=auth_headers)

    assert response.status_code == 200
    summary = response.json()
    assert summary["cardCount"] == 2
    assert summary["totalBalance"] == 500
    assert summary["totalMinimumPayment"] == 50
    assert [entry["name"] for entry in summary["upcoming"]] == ["Soon", "Later"]
    assert summary["upcoming"][0]["daysUntilDue"] == 3
