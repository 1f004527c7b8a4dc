from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from database.crud import create_transaction
from main import auth_service, create_app
from models.transaction import TransactionCreate


def make_transaction(id, amount, category="Revenue", status="Paid", date=None, **overrides):
    fields = {
        "id": id,
        "date": date or datetime(2023, 1, 15, 12, 0, 0),
        "amount": amount,
        "description": f"Transaction {id}",
        "category": category,
        "status": status,
        "user_id": "user_001",
        "user_name": "John Smith",
        "user_profile": "https://randomuser.me/api/portraits/men/1.jpg",
    }
    fields.update(overrides)
    return TransactionCreate(**fields)


@pytest.fixture
def app():
    return create_app("sqlite://")


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client, app):
    session = app.state.database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_transactions(db):
    def _add(*transactions):
        for transaction in transactions:
            create_transaction(db, transaction)
    return _add


@pytest.fixture
def sample_transactions(add_transactions):
    transactions = [
        make_transaction(1, 100, "Revenue", "Paid"),
        make_transaction(2, 50, "Expense", "Pending"),
        make_transaction(3, 200, "Revenue", "Paid"),
    ]
    add_transactions(*transactions)
    return transactions


@pytest.fixture
def auth_headers():
    token = auth_service.create_access_token(1, "tester@example.com")
    return {"Authorization": f"Bearer {token}"}
