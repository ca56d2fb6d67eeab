"""Parse bank statement exports into unsaved transactions.

A statement is read as one flat stream of ``;``-separated tokens. After the
leading header cells, tokens come in groups of four: date, description, debit,
credit. Empty cells and cells that are not a DD/MM/YYYY date are skipped one
token at a time, which re-aligns the scan on ragged exports. A trailing group
with fewer than four tokens is dropped.
"""
import re
from pathlib import Path

from models.transaction import Transaction
from utils.constants import (
    HEADER_TOKEN_COUNT,
    STATEMENT_ENCODING,
    STATEMENT_FIELD_COUNT,
    UNKNOWN_ACCOUNT,
)
from utils.date_helpers import parse_statement_date

_ACCOUNT_NAME_RE = re.compile(r"^(.*?)(carte|n°)")
_WHITESPACE_RE = re.compile(r"\s+")


def _strip_line_breaks(value: str) -> str:
    return value.replace("\n", "").replace("\r", "")


def clean_description(value: str) -> str:
    text = _strip_line_breaks(value).replace('"', "")
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_amount(value: str) -> float | None:
    """'12,50' -> 12.5; empty or non-numeric cells -> None."""
    try:
        return float(_strip_line_breaks(value).replace(",", "."))
    except ValueError:
        return None


def parse_account_name(raw_text: str) -> str:
    for line in raw_text.splitlines():
        match = _ACCOUNT_NAME_RE.search(line)
        if match:
            return match.group(1).strip()
    return UNKNOWN_ACCOUNT


def parse_transactions(
    raw_text: str, username: str, account: str | None = None
) -> list[Transaction]:
    if account is None:
        account = parse_account_name(raw_text)

    tokens = raw_text.split(";")
    transactions: list[Transaction] = []
    i = HEADER_TOKEN_COUNT

    while i + STATEMENT_FIELD_COUNT - 1 < len(tokens):
        if tokens[i] == "":
            i += 1
            continue

        tx_date = parse_statement_date(tokens[i])
        if tx_date is None:
            i += 1
            continue

        transactions.append(
            Transaction(
                id=0,
                date=tx_date,
                username=username,
                description=clean_description(tokens[i + 1]),
                custom_description="",
                account=account,
                debit=parse_amount(tokens[i + 2]),
                credit=parse_amount(tokens[i + 3]),
            )
        )
        i += STATEMENT_FIELD_COUNT

    return transactions


def read_statement(path: str | Path, encoding: str = STATEMENT_ENCODING) -> str:
    """Bank exports are Windows-1252 text."""
    with open(path, "r", encoding=encoding, errors="replace", newline="") as f:
        return f.read()


def parse_statement_file(
    path: str | Path, username: str, account: str | None = None
) -> list[Transaction]:
    return parse_transactions(read_statement(path), username, account)
