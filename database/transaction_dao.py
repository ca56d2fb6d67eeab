import logging
from datetime import date
from typing import Optional

from database.db_manager import DatabaseManager
from models.transaction import Transaction
from utils.constants import DECRYPT_FALLBACK, MISSING_ACCOUNT_NAME
from utils.crypto import DecryptionError, FieldCipher
from utils.date_helpers import format_date, parse_date

logger = logging.getLogger(__name__)


class TransactionDAO:
    """Encrypted access to the transactions table for one user's key."""

    def __init__(self, db: DatabaseManager, cipher: FieldCipher):
        self._db = db
        self._cipher = cipher

    def _decrypt_amount(self, value: Optional[str]) -> float:
        if value is None:
            return 0.0
        try:
            return float(self._cipher.decrypt(value))
        except ValueError:
            return float(DECRYPT_FALLBACK)

    def _row_to_model(self, row) -> Optional[Transaction]:
        try:
            tx_date = parse_date(self._cipher.try_decrypt(row["date"]))
        except DecryptionError:
            tx_date = None
        if tx_date is None:
            logger.warning("Skipping transaction %s: unreadable date", row["id"])
            return None

        account = row["account"]
        custom = row["custom_description"]
        return Transaction(
            id=row["id"],
            date=tx_date,
            username=self._cipher.decrypt(row["username"]),
            description=self._cipher.decrypt(row["description"]),
            custom_description=self._cipher.decrypt(custom) if custom is not None else "",
            account=self._cipher.decrypt(account) if account is not None else MISSING_ACCOUNT_NAME,
            credit=self._decrypt_amount(row["credit"]),
            debit=self._decrypt_amount(row["debit"]),
        )

    def _select(self) -> str:
        return """
            SELECT id, date, username, description, custom_description,
                   account, credit, debit
            FROM transactions
        """

    def get_for_user(self, username: str) -> list[Transaction]:
        with self._db.connect() as conn:
            rows = conn.execute(
                self._select() + " WHERE username = ? ORDER BY id ASC",
                (self._cipher.encrypt(username),),
            ).fetchall()
        transactions = (self._row_to_model(r) for r in rows)
        return [tx for tx in transactions if tx is not None]

    def get_by_id(self, tx_id: int) -> Optional[Transaction]:
        with self._db.connect() as conn:
            row = conn.execute(self._select() + " WHERE id = ?", (tx_id,)).fetchone()
        return self._row_to_model(row) if row else None

    def get_accounts(self, username: str) -> list[str]:
        """Distinct account names, first-seen order."""
        with self._db.connect() as conn:
            rows = conn.execute(
                "SELECT account FROM transactions WHERE username = ? ORDER BY id ASC",
                (self._cipher.encrypt(username),),
            ).fetchall()
        accounts: list[str] = []
        for row in rows:
            encrypted = row["account"]
            name = self._cipher.decrypt(encrypted) if encrypted is not None else MISSING_ACCOUNT_NAME
            if name not in accounts:
                accounts.append(name)
        return accounts

    def insert(
        self,
        date_: date,
        username: str,
        description: str,
        account: str,
        credit: Optional[float],
        debit: Optional[float],
    ) -> int:
        encrypt = self._cipher.encrypt
        with self._db.connect() as conn:
            cursor = conn.execute(
                """INSERT INTO transactions
                   (id, username, date, description, custom_description, account, credit, debit)
                   VALUES (NULL, ?, ?, ?, NULL, ?, ?, ?)""",
                (
                    encrypt(username),
                    encrypt(format_date(date_)),
                    encrypt(description),
                    encrypt(account),
                    encrypt(str(float(credit))) if credit is not None else None,
                    encrypt(str(float(debit))) if debit is not None else None,
                ),
            )
            return cursor.lastrowid

    def update_custom_description(self, tx_id: int, custom_description: str) -> bool:
        with self._db.connect() as conn:
            cursor = conn.execute(
                "UPDATE transactions SET custom_description = ? WHERE id = ?",
                (self._cipher.encrypt(custom_description), tx_id),
            )
            return cursor.rowcount > 0

    def delete_for_user(self, username: str) -> int:
        with self._db.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE username = ?",
                (self._cipher.encrypt(username),),
            )
            return cursor.rowcount
