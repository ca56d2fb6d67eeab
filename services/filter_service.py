from datetime import date

from models.transaction import Transaction
from services.transaction_service import TransactionService
from utils.constants import AccountFilter


class FilterService:
    """Applies the table view's filter state for one logged-in user."""

    def __init__(self, tx_service: TransactionService, username: str):
        self._tx_svc = tx_service
        self._username = username

    def get_transactions_by_date(
        self, after_date: date | None = None, before_date: date | None = None
    ) -> list[Transaction]:
        if after_date is None and before_date is not None:
            return self._tx_svc.get_transactions_before(self._username, before_date)
        if after_date is not None and before_date is None:
            return self._tx_svc.get_transactions_after(self._username, after_date)
        if after_date is not None and before_date is not None:
            return self._tx_svc.get_transactions_between(
                self._username, after_date, before_date
            )
        return self._tx_svc.get_transactions(self._username)

    def get_transactions_by_account(
        self,
        account: str | AccountFilter,
        before_date: date | None = None,
        after_date: date | None = None,
    ) -> list[Transaction]:
        transactions = self.get_transactions_by_date(after_date, before_date)
        if account is not AccountFilter.ALL:
            transactions = [t for t in transactions if t.account == account]
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    def get_transactions(
        self,
        account: str | AccountFilter,
        only_credits: bool,
        only_debits: bool,
        before_date: date | None = None,
        after_date: date | None = None,
    ) -> list[Transaction]:
        """When both toggles are set, only_credits wins."""
        transactions = self.get_transactions_by_account(account, before_date, after_date)
        if only_credits:
            return [
                t for t in transactions
                if t.credit_amount != 0.0 and t.debit_amount == 0.0
            ]
        if only_debits:
            return [
                t for t in transactions
                if t.debit_amount != 0.0 and t.credit_amount == 0.0
            ]
        return transactions
