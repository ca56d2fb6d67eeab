import logging
from collections import Counter
from datetime import date
from typing import Iterable, Optional

from database.transaction_dao import TransactionDAO
from models.transaction import Transaction

logger = logging.getLogger(__name__)


def _newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


class TransactionService:
    def __init__(self, tx_dao: TransactionDAO):
        self._dao = tx_dao

    def get_accounts(self, username: str) -> list[str]:
        return self._dao.get_accounts(username)

    def get_transactions(self, username: str) -> list[Transaction]:
        return self._dao.get_for_user(username)

    def get_transactions_before(self, username: str, before: date) -> list[Transaction]:
        """Transactions on or before the given day, newest first."""
        return _newest_first(
            t for t in self.get_transactions(username) if t.date <= before
        )

    def get_transactions_after(self, username: str, after: date) -> list[Transaction]:
        """Transactions on or after the given day, newest first."""
        return _newest_first(
            t for t in self.get_transactions(username) if t.date >= after
        )

    def get_transactions_between(
        self, username: str, start: date, end: date
    ) -> list[Transaction]:
        """start inclusive, end exclusive, newest first."""
        return _newest_first(
            t for t in self.get_transactions(username) if start <= t.date < end
        )

    def add_transaction(
        self,
        date_: date,
        username: str,
        description: str,
        account: str,
        credit: Optional[float],
        debit: Optional[float],
    ) -> int:
        return self._dao.insert(date_, username, description, account, credit, debit)

    def upload_transactions(self, transactions: list[Transaction]) -> int:
        """Insert imported transactions that are not stored yet.

        Matching uses the dedup key. A statement may legitimately list the same
        key twice; each candidate is inserted while fewer rows with its key are
        stored than appear in the batch. Returns the number of inserted rows.
        """
        wanted = Counter(t.dedup_key() for t in transactions)
        stored: Counter = Counter()
        for username in {t.username for t in transactions}:
            stored.update(t.dedup_key() for t in self.get_transactions(username))

        inserted = 0
        for tx in transactions:
            key = tx.dedup_key()
            if stored[key] < wanted[key]:
                self.add_transaction(
                    tx.date, tx.username, tx.description,
                    tx.account or "unknown", tx.credit, tx.debit,
                )
                stored[key] += 1
                inserted += 1

        logger.info(
            "Uploaded %d of %d imported transactions", inserted, len(transactions)
        )
        return inserted

    def update_transaction_description(self, tx_id: int, custom_description: str) -> bool:
        return self._dao.update_custom_description(tx_id, custom_description)

    def clear_transactions(self, username: str) -> int:
        deleted = self._dao.delete_for_user(username)
        logger.info("Deleted %d transactions for %r", deleted, username)
        return deleted
