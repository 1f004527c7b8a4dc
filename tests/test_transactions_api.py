import math
from datetime import datetime, timedelta

import pytest

import main

from services.query_service import MAX_PAGE, MAX_PAGE_LIMIT

from conftest import make_transaction


@pytest.fixture
def many_transactions(add_transactions):
    start = datetime(2023, 1, 1)
    add_transactions(*[
        make_transaction(
            index,
            float(index * 10),
            "Revenue" if index % 3 else "Expense",
            "Paid" if index % 2 else "Pending",
            date=start + timedelta(days=index),
            user_id=f"user_00{index % 4 + 1}",
        )
        for index in range(1, 24)
    ])


def test_filter_by_category(client, auth_headers, sample_transactions):
    response = client.get("/transactions", params={"category": "Revenue"}, headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert sorted(t["id"] for t in body["transactions"]) == [1, 3]
    assert body["pagination"]["total"] == 2


def test_response_shape(client, auth_headers, sample_transactions):
    body = client.get("/transactions", headers=auth_headers).json()
    assert body["pagination"] == {
        "page": 1,
        "limit": 10,
        "total": 3,
        "totalPages": 1,
        "currentPage": 1,
        "totalTransactions": 3,
        "hasNext": False,
        "hasPrev": False,
    }
    transaction = body["transactions"][0]
    assert set(transaction) == {
        "id", "date", "amount", "description", "category", "status",
        "user_id", "user_name", "user_profile", "createdAt",
    }
    assert transaction["user_name"] == "John Smith"


def test_pages_cover_filtered_set_without_gaps(client, auth_headers, many_transactions):
    for limit in (1, 4, 7, 23, 50):
        first = client.get("/transactions", params={"status": "Paid", "limit": limit}, headers=auth_headers).json()
        total = first["pagination"]["total"]
        total_pages = first["pagination"]["totalPages"]
        assert total_pages == math.ceil(total / limit)

        seen = []
        for page in range(1, total_pages + 1):
            body = client.get(
                "/transactions",
                params={"status": "Paid", "limit": limit, "page": page},
                headers=auth_headers,
            ).json()
            assert len(body["transactions"]) <= limit
            assert body["pagination"]["hasNext"] == (page < total_pages)
            assert body["pagination"]["hasPrev"] == (page > 1)
            seen.extend(t["id"] for t in body["transactions"])

        assert len(seen) == len(set(seen)) == total
        assert set(seen) == {index for index in range(1, 24) if index % 2}


def test_page_past_the_end_is_empty(client, auth_headers, many_transactions):
    body = client.get("/transactions", params={"page": 10, "limit": 10}, headers=auth_headers).json()
    assert body["transactions"] == []
    assert body["pagination"]["total"] == 23
    assert body["pagination"]["hasNext"] is False
    assert body["pagination"]["hasPrev"] is True


def test_default_sort_is_newest_first(client, auth_headers, many_transactions):
    body = client.get("/transactions", params={"limit": 3}, headers=auth_headers).json()
    assert [t["id"] for t in body["transactions"]] == [23, 22, 21]


def test_sort_by_amount_both_directions(client, auth_headers, many_transactions):
    params = {"sortBy": "amount", "limit": 100}
    asc = client.get("/transactions", params={**params, "sortOrder": "asc"}, headers=auth_headers).json()
    desc = client.get("/transactions", params={**params, "sortOrder": "desc"}, headers=auth_headers).json()
    asc_amounts = [t["amount"] for t in asc["transactions"]]
    desc_amounts = [t["amount"] for t in desc["transactions"]]
    assert asc_amounts == sorted(asc_amounts)
    assert desc_amounts == list(reversed(asc_amounts))


def test_unknown_sort_field_is_a_validation_error(client, auth_headers, sample_transactions):
    response = client.get("/transactions", params={"sortBy": "password"}, headers=auth_headers)
    assert response.status_code == 400
    assert "sortBy" in response.json()["error"]


def test_search_by_amount_with_currency_symbols(client, auth_headers, add_transactions):
    add_transactions(
        make_transaction(1, 1200, description="Consulting Services"),
        make_transaction(2, 120, description="Utility Bills"),
        make_transaction(3, 1200.5, description="Server Hosting"),
    )
    body = client.get("/transactions", params={"search": "$1,200"}, headers=auth_headers).json()
    assert [t["id"] for t in body["transactions"]] == [1]


def test_search_text(client, auth_headers, add_transactions):
    add_transactions(
        make_transaction(1, 10, description="Office Rent Payment"),
        make_transaction(2, 20, description="Legal Fees", user_name="Rent-a-Lawyer"),
        make_transaction(3, 30, description="Travel Expenses"),
    )
    body = client.get("/transactions", params={"search": " rent ", "sortBy": "id", "sortOrder": "asc"},
                      headers=auth_headers).json()
    assert [t["id"] for t in body["transactions"]] == [1, 2]


def test_unknown_status_returns_no_rows(client, auth_headers, sample_transactions):
    response = client.get("/transactions", params={"status": "Refunded"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["transactions"] == []
    assert response.json()["pagination"]["total"] == 0


def test_filter_by_user_id(client, auth_headers, many_transactions):
    body = client.get("/transactions", params={"user_id": "user_002", "limit": 100}, headers=auth_headers).json()
    assert {t["user_id"] for t in body["transactions"]} == {"user_002"}
    assert body["pagination"]["total"] == len([i for i in range(1, 24) if i % 4 == 1])


@pytest.mark.parametrize("params, page, limit", [
    ({"page": 0}, 1, 10),
    ({"page": -2, "limit": -5}, 1, 1),
    ({"limit": 0}, 1, 1),
    ({"limit": 1_000_000}, 1, MAX_PAGE_LIMIT),
])
def test_page_and_limit_are_clamped(client, auth_headers, sample_transactions, params, page, limit):
    pagination = client.get("/transactions", params=params, headers=auth_headers).json()["pagination"]
    assert pagination["page"] == page
    assert pagination["limit"] == limit


def test_non_numeric_page_is_a_validation_error(client, auth_headers):
    response = client.get("/transactions", params={"page": "two"}, headers=auth_headers)
    assert response.status_code == 400
    assert "page" in response.json()["error"]


def test_query_failure_returns_generic_error(client, auth_headers, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("database is on fire")

    monkeypatch.setattr(main.query_service, "search", broken)
    response = client.get("/transactions", headers=auth_headers)
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_page_beyond_maximum_is_a_validation_error(client, auth_headers, sample_transactions):
    response = client.get("/transactions", params={"page": 10 ** 19}, headers=auth_headers)
    assert response.status_code == 400
    assert "page" in response.json()["error"]


def test_maximum_page_is_an_empty_page(client, auth_headers, sample_transactions):
    response = client.get("/transactions", params={"page": MAX_PAGE, "limit": MAX_PAGE_LIMIT},
                          headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["transactions"] == []
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["hasNext"] is False
