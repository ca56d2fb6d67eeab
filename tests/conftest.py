from datetime import date

import pytest

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from services.filter_service import FilterService
from services.report_service import ReportService
from services.transaction_service import TransactionService
from utils.crypto import FieldCipher


@pytest.fixture()
def password():
    return "s3cret-pw"


@pytest.fixture()
def cipher(password):
    return FieldCipher(password)


@pytest.fixture()
def db(tmp_path):
    db = DatabaseManager(tmp_path / "budget.db")
    db.initialize()
    return db


@pytest.fixture()
def tx_service(db, cipher):
    return TransactionService(TransactionDAO(db, cipher))


@pytest.fixture()
def seeded(tx_service):
    rows = [
        (date(2024, 1, 10), "Salary", "Checking", 2000.0, None),
        (date(2024, 1, 12), "Groceries", "Checking", None, 80.0),
        (date(2024, 2, 3), "Refund", "Card", 20.0, None),
        (date(2024, 2, 15), "Rent", "Checking", None, 700.0),
        (date(2024, 3, 1), "Transfer", "Card", 50.0, 50.0),
    ]
    for day, description, account, credit, debit in rows:
        tx_service.add_transaction(day, "alice", description, account, credit, debit)
    return tx_service


@pytest.fixture()
def filter_service(seeded):
    return FilterService(seeded, "alice")


@pytest.fixture()
def report_service(seeded, filter_service):
    return ReportService(seeded, filter_service, "alice")
