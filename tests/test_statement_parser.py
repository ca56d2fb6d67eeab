from datetime import date

from services.statement_parser import (
    clean_description,
    parse_account_name,
    parse_amount,
    parse_statement_file,
    parse_transactions,
)
from utils.date_helpers import parse_statement_date


STATEMENT = (
    "Compte courant carte n° 1234;;;\r\n"
    "Date;Libellé;Débit;Crédit;\r\n"
    '03/01/2024;"PRLV  SEPA\r\n   EDF";45,20;;\r\n'
    "05/01/2024;VIR SALAIRE;;2000,00;\r\n"
)


def test_single_group_after_header():
    transactions = parse_transactions("A;B;C;D;01/01/2024;Coffee Shop;5,00;", "alice")

    assert len(transactions) == 1
    tx = transactions[0]
    assert tx.id == 0
    assert tx.date == date(2024, 1, 1)
    assert tx.description == "Coffee Shop"
    assert tx.debit == 5.0
    assert tx.credit is None
    assert tx.username == "alice"
    assert tx.custom_description == ""
    assert tx.account == "Unknown Account"


def test_trailing_fragment_is_dropped():
    raw = "H;H;H;H;01/01/2024;Shop;1,00;;02/01/2024;Bakery"

    transactions = parse_transactions(raw, "alice")

    assert [t.description for t in transactions] == ["Shop"]


def test_empty_cells_resync_on_next_date():
    raw = "H1;H2;H3;H4;;01/01/2024;Shop;1,00;;;02/01/2024;Bakery;;3,50"

    transactions = parse_transactions(raw, "alice")

    assert [(t.date, t.description, t.debit, t.credit) for t in transactions] == [
        (date(2024, 1, 1), "Shop", 1.0, None),
        (date(2024, 1, 2), "Bakery", None, 3.5),
    ]


def test_non_date_token_is_skipped():
    transactions = parse_transactions("H;H;H;H;garbage;01/02/2024;Rent;700,00;", "alice")

    assert len(transactions) == 1
    assert transactions[0].description == "Rent"
    assert transactions[0].debit == 700.0


def test_multiline_statement_with_header_rows():
    transactions = parse_transactions(STATEMENT, "alice")

    assert len(transactions) == 2
    first, second = transactions
    assert first.date == date(2024, 1, 3)
    assert first.description == "PRLV SEPA EDF"
    assert first.debit == 45.2
    assert first.credit is None
    assert second.description == "VIR SALAIRE"
    assert second.debit is None
    assert second.credit == 2000.0
    assert {t.account for t in transactions} == {"Compte courant"}


def test_supplied_account_wins_over_statement_hint():
    transactions = parse_transactions(STATEMENT, "alice", account="Joint")

    assert {t.account for t in transactions} == {"Joint"}


def test_malformed_input_never_raises():
    assert parse_transactions("", "alice") == []
    assert parse_transactions("just;some;junk", "alice") == []
    assert parse_transactions("a;b;c;d;e;f;g;h;i;j", "alice") == []


def test_account_name_hint():
    assert parse_account_name("Livret A n° 00012345;;;\nDate;...") == "Livret A"
    assert parse_account_name("header\nCompte Joint carte 4970;") == "Compte Joint"
    assert parse_account_name("Date;Libellé;Débit;Crédit") == "Unknown Account"


def test_cell_cleanup():
    assert clean_description('"CB  CARREFOUR\r\n   MARKET" ') == "CB CARREFOUR MARKET"
    assert parse_amount("12,50\r\n") == 12.5
    assert parse_amount("") is None
    assert parse_amount("n/a") is None


def test_statement_file_is_read_as_cp1252(tmp_path):
    path = tmp_path / "releve.csv"
    path.write_bytes(STATEMENT.encode("cp1252"))

    transactions = parse_statement_file(path, "alice")

    assert len(transactions) == 2
    assert transactions[0].account == "Compte courant"


def test_date_cells_are_parsed_strictly():
    raw = "H;H;H;H;32/01/2024;03/01/2024 ;02/01/2024;Shop;1,00;"

    transactions = parse_transactions(raw, "alice")

    assert [(t.date, t.description) for t in transactions] == [(date(2024, 1, 2), "Shop")]
    assert parse_statement_date("03/01/2024\r\n") == date(2024, 1, 3)
    assert parse_statement_date("03/01/2024 ") is None
    assert parse_statement_date("32/01/2024") is None
